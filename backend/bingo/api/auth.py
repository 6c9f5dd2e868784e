import requests
from flask import Blueprint, current_app, jsonify, request

auth = Blueprint('auth', __name__)


@auth.route('/token', methods=['POST'])
def exchange_token():
    """
    Exchanges a Discord OAuth2 code for an access token and the user's identity.

    Only ``{access_token, user}`` is handed back to the client; nothing is
    stored server-side.
    """
    data = request.get_json(silent=True) or {}
    code = data.get('code')
    if not code:
        return jsonify({'error': 'missing_code'}), 400

    cfg = current_app.config
    api_base = cfg.get('DISCORD_API_BASE', 'https://discord.com/api').rstrip('/')
    client_id = cfg.get('DISCORD_CLIENT_ID') or ''
    timeout = cfg.get('TOKEN_EXCHANGE_TIMEOUT_SEC', 10)

    try:
        token_resp = requests.post(
            f"{api_base}/oauth2/token",
            data={
                'client_id': client_id,
                'client_secret': cfg.get('DISCORD_CLIENT_SECRET') or '',
                'grant_type': 'authorization_code',
                'code': code,
                'redirect_uri': f"https://{client_id}.discordsays.com",
            },
            headers={'Content-Type': 'application/x-www-form-urlencoded'},
            timeout=timeout,
        )
        if not token_resp.ok:
            current_app.logger.error(f"[token] exchange returned {token_resp.status_code}: {token_resp.text}")
            return jsonify({'error': 'token_exchange_failed'}), 502

        access_token = token_resp.json().get('access_token')
        if not access_token:
            current_app.logger.error("[token] no access_token in token response")
            return jsonify({'error': 'token_exchange_failed'}), 502

        user_resp = requests.get(
            f"{api_base}/users/@me",
            headers={'Authorization': f"Bearer {access_token}"},
            timeout=timeout,
        )
        if not user_resp.ok:
            current_app.logger.error(f"[token] user lookup returned {user_resp.status_code}: {user_resp.text}")
            return jsonify({'error': 'failed_fetch_user'}), 502

        user = user_resp.json()
    except (requests.RequestException, ValueError) as exc:
        current_app.logger.error(f"[token] exchange failed: {exc}")
        return jsonify({'error': 'token_exchange_failed'}), 500

    return jsonify({'access_token': access_token, 'user': user})
