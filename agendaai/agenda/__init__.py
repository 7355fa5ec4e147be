# agendaai/agenda/__init__.py

from flask import Blueprint

bp = Blueprint('agenda', __name__)

from . import routes
