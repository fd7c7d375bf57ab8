"""
utils/responses.py
-----------------
Uniform JSON envelope used by every endpoint:

    {"success": bool, "status": int, "message": str, "data": ...}
"""

from flask import jsonify


class ApiError(Exception):
    def __init__(self, status_code, message="Error", data=None):
        super().__init__(message)
        self.status_code = status_code
        self.message = message
        self.data = data


class ResponseMessage:
    @staticmethod
    def not_found(model):
        return f"{model} not found"

    @staticmethod
    def created(model):
        return f"{model} created successfully"

    @staticmethod
    def updated(model):
        return f"{model} updated successfully"

    @staticmethod
    def deleted(model):
        return f"{model} deleted successfully"

    @staticmethod
    def fetched(model):
        return f"{model} fetched successfully"

    @staticmethod
    def status_updated(model):
        return f"{model} status updated successfully"

    @staticmethod
    def already_exists(model):
        return f"{model} with this name already exists"

    @staticmethod
    def required(model):
        return f"{model} required"


response_message = ResponseMessage()


def send_success(message="Success", status=200, payload=None):
    body = {
        "success": True,
        "status": status,
        "message": message,
        "data": payload,
    }
    return jsonify(body), status


def send_error(message="Error", status=500, payload=None):
    body = {
        "success": False,
        "status": status,
        "message": message,
        "data": payload,
    }
    return jsonify(body), status
