import os
import requests
from dotenv import load_dotenv, find_dotenv
import json
from invoke import task

from agendaai import ingestion
from agendaai.errors import IngestionError

# .env ファイルの読み込み
dotenv_path = find_dotenv()
if dotenv_path:
    print(f"Loading .env file from: {dotenv_path}")
    load_dotenv(dotenv_path)
else:
    print("Warning: .env file not found, using default settings or environment variables.")

# --- グローバル設定 ---
API_BASE_URL = os.getenv('API_BASE_URL', 'http://127.0.0.1:5000')
SECRET_AUTH_KEY = os.getenv('SECRET_AUTH_KEY', 'mysecretkey_app_init_default')

# --- APIリクエスト ヘルパー ---

def _send_request(method, endpoint, auth_key=SECRET_AUTH_KEY, json_data=None, params=None):
    """HTTPリクエストを送信する共通ヘルパー (requests使用)"""
    url = f"{API_BASE_URL}{endpoint}"
    headers = {}
    if auth_key:
        headers["X-Auth-Key"] = auth_key

    print(f"Sending {method.upper()} request to {url}...")
    try:
        # 生成は数十秒かかることがあるため長めのタイムアウト
        return requests.request(method.upper(), url, headers=headers, json=json_data, params=params, timeout=300)
    except requests.exceptions.RequestException as e:
        print(f"Request to {url} failed: {e}")
        return None
    finally:
        print("-" * 20)


def _print_response(response):
    if response is None:
        print("No response object")
        return False
    print(f"Status: {response.status_code}")
    try:
        print(json.dumps(response.json(), indent=2, ensure_ascii=False))
    except requests.exceptions.JSONDecodeError:
        print(response.text)
    return response.ok

# --- Invoke Tasks ---

@task
def setup(c):
    """Installs the package with test dependencies."""
    print("Installing dependencies...")
    c.run('pip install -e ".[test]"', hide=False)
    print("Setup complete.")


@task
def run_server(c):
    """Starts the Flask development server (using application factory)."""
    port = API_BASE_URL.split(':')[-1] if ':' in API_BASE_URL else '5000'
    print(f"Starting Flask server on http://0.0.0.0:{port} (using agendaai:create_app())...")
    env_vars = os.environ.copy()
    env_vars.update({
        'FLASK_APP': 'agendaai:create_app()',
        'SECRET_AUTH_KEY': str(SECRET_AUTH_KEY) if SECRET_AUTH_KEY else ''
    })
    c.run(f'flask run --host=0.0.0.0 --port={port} --no-reload', env=env_vars, pty=True)


@task
def test(c):
    """Runs the pytest suite."""
    c.run('pytest tests', pty=True)


@task(help={'path': "Path to a PDF, text, markdown or image file"})
def upload(c, path):
    """Uploads a document and prints the generated agenda."""
    try:
        uploaded = ingestion.from_path(path)
    except IngestionError as e:
        print(f"Error: {e.message}")
        return False

    payload = {
        "name": uploaded.name,
        "mime_type": uploaded.mime_type,
        "size": uploaded.size,
        "data": uploaded.data,
    }
    print(f"Uploading {payload['name']} ({payload['mime_type']}, {payload['size']} bytes)")
    return _print_response(_send_request('POST', '/agenda/upload', json_data=payload))


@task(help={'text': "Print the agenda as plain text instead of JSON"})
def show_agenda(c, text=False):
    """Prints the current agenda."""
    params = {'format': 'text'} if text else None
    return _print_response(_send_request('GET', '/agenda', params=params))


@task(help={'text': "Question to ask about the document"})
def ask(c, text):
    """Sends a chat message about the current document."""
    return _print_response(_send_request('POST', '/chat/messages', json_data={"text": text}))


@task
def transcript(c):
    """Prints the chat transcript."""
    return _print_response(_send_request('GET', '/chat/messages'))


@task
def clear(c):
    """Clears the current document, agenda and chat."""
    return _print_response(_send_request('DELETE', '/agenda'))


@task
def status(c):
    """Prints the workspace status."""
    return _print_response(_send_request('GET', '/status'))
