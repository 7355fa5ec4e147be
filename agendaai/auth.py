# agendaai/auth.py

import functools
import hmac

from flask import request, jsonify, current_app

AUTH_HEADER = 'X-Auth-Key'


def authenticate_request(f):
    """
    リクエストヘッダーの 'X-Auth-Key' を SECRET_AUTH_KEY と照合するデコレータ。
    """
    @functools.wraps(f)
    def decorated_function(*args, **kwargs):
        auth_key = request.headers.get(AUTH_HEADER)

        if not auth_key:
            current_app.logger.error(f"{AUTH_HEADER} header missing on {request.path}.")
            return jsonify({"message": "Authorization header missing"}), 401

        expected = current_app.config.get('SECRET_AUTH_KEY') or ''
        if not hmac.compare_digest(auth_key.encode('utf-8'), expected.encode('utf-8')):
            # キーそのものはログに残さない
            current_app.logger.warning(f"Unauthorized access attempt on {request.path}.")
            return jsonify({"message": "Unauthorized"}), 401

        return f(*args, **kwargs)
    return decorated_function
