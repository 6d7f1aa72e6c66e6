"""Service layer.

The application factory builds one instance of each service and stores it in
``app.extensions``; views fetch them through the accessors below.
"""

from flask import current_app


def get_workflow():
    return current_app.extensions["verification_workflow"]


def get_auth_service():
    return current_app.extensions["auth_service"]


def get_notifier():
    return current_app.extensions["notifier"]
