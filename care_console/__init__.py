"""
Care coordination console web application.
"""
