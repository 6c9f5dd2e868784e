import json
import os

from flask import Blueprint, Response, abort, current_app, jsonify, send_from_directory

from bingo.themes import list_themes

main = Blueprint('main', __name__)


def _public_dir():
    public_dir = current_app.config.get('PUBLIC_DIR')
    if public_dir and os.path.isdir(public_dir):
        return public_dir
    return None


@main.route('/')
def index():
    public_dir = _public_dir()
    if public_dir and os.path.isfile(os.path.join(public_dir, 'index.html')):
        return send_from_directory(public_dir, 'index.html')
    return jsonify({'message': 'Welcome to the bingo server!'})


@main.route('/env.js')
def env_js():
    # Expose the Discord client id to the built client at runtime
    env = {'VITE_DISCORD_CLIENT_ID': current_app.config.get('DISCORD_CLIENT_ID') or ''}
    body = f"window.__ENV__ = {json.dumps(env)};"
    return Response(body, mimetype='application/javascript')


@main.route('/api/themes')
def get_themes():
    return jsonify([theme.to_dict() for theme in list_themes()])


@main.route('/<path:filename>')
def static_files(filename):
    public_dir = _public_dir()
    if not public_dir:
        abort(404)
    return send_from_directory(public_dir, filename)
