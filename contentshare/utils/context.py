from flask import current_app

# Services are built once in create_app() and kept on app.extensions


def access_policy():
    return current_app.extensions["access_policy"]


def link_manager():
    return current_app.extensions["link_manager"]


def credentials():
    return current_app.extensions["credentials"]


def secret_store():
    return current_app.extensions["secret_store"]


def aggregation():
    return current_app.extensions["aggregation"]
