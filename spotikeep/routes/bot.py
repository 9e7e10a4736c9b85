"""
🤖 Bot Routes Blueprint
Bot/interrupt flags, the manual kick and the raw state dump.
"""

import logging

from flask import Blueprint, redirect, url_for

from ..services.service_manager import get_service
from .helpers import api_error_handler, result_response

bot_bp = Blueprint("bot", __name__)
logger = logging.getLogger(__name__)


@bot_bp.route("/bot/on")
def bot_on():
    get_service("bot").enable()
    return redirect(url_for("bot.state"))


@bot_bp.route("/bot/off")
def bot_off():
    get_service("bot").disable()
    return redirect(url_for("bot.state"))


@bot_bp.route("/interrupt/on")
@api_error_handler
def interrupt_on():
    return result_response(get_service("bot").set_interrupt(True))


@bot_bp.route("/interrupt/off")
@api_error_handler
def interrupt_off():
    return result_response(get_service("bot").set_interrupt(False))


@bot_bp.route("/kick")
@api_error_handler
def kick():
    """Start the selected playlist on the selected device right now."""
    return result_response(get_service("bot").kick())


@bot_bp.route("/state")
@api_error_handler
def state():
    return result_response(get_service("bot").state())
