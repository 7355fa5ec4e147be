# agendaai/gemini.py
"""
google-generativeai SDK とのやり取りに共通するヘルパー。
レスポンスの candidate / parts の扱いはここに集約する。
"""

import base64
import logging
from typing import Dict, List, Optional

import google.generativeai as genai

from agendaai.errors import ConfigurationError

logger = logging.getLogger(__name__)


def configure(api_key: Optional[str]) -> bool:
    """APIキーでSDKを設定する。キーが無い場合は False を返し、呼び出し時にエラーとなる。"""
    if not api_key:
        return False
    genai.configure(api_key=api_key)
    # キー全体はログに出さない
    logger.info(f"Google Generative AI configured (key ending in ...{api_key[-4:]}).")
    return True


def ensure_configured(api_key: Optional[str]):
    """呼び出し元が持つキーをSDKに設定する。create_app の外で使われた場合もこのキーで認証される。"""
    if not api_key:
        raise ConfigurationError("GOOGLE_GEN_AI_API_KEY is not configured.")
    genai.configure(api_key=api_key)


def inline_document(data: str, mime_type: str) -> Dict:
    """Base64文字列をインラインのBlobパートに変換する。"""
    return {"mime_type": mime_type, "data": base64.b64decode(data)}


def _finish_reason_name(candidate) -> str:
    reason = getattr(candidate, 'finish_reason', None)
    return str(getattr(reason, 'name', reason) or '')


def blocked_by_safety(response) -> bool:
    candidates = getattr(response, 'candidates', None)
    if not candidates:
        return False
    return _finish_reason_name(candidates[0]) == 'SAFETY'


def safety_details(response) -> List[str]:
    """SAFETYでブロックされた場合のカテゴリと確率の一覧。"""
    details = []
    candidates = getattr(response, 'candidates', None) or []
    for candidate in candidates[:1]:
        for rating in getattr(candidate, 'safety_ratings', None) or []:
            category = getattr(rating.category, 'name', rating.category)
            probability = getattr(rating.probability, 'name', rating.probability)
            details.append(f"{category}: {probability}")
    return details


def response_text(response) -> Optional[str]:
    """
    レスポンスの最初の candidate からテキストを取り出す。
    candidate や parts が無い場合は None を返す (response.text は例外を投げるため使わない)。
    """
    candidates = getattr(response, 'candidates', None)
    if not candidates:
        return None
    content = getattr(candidates[0], 'content', None)
    parts = getattr(content, 'parts', None) if content else None
    if not parts:
        return None
    texts = [part.text for part in parts if getattr(part, 'text', None)]
    return ''.join(texts) or None
