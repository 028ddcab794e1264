from flask import Blueprint

message_bp = Blueprint("message", __name__)

@message_bp.route("/message", methods=["GET", "POST"])
def message():
    return "Hello, from the API!"
