# views/titles.py

import asyncio

from flask import Blueprint, current_app, jsonify, request

from services.catalog_service import TOP_KINDS, fetch_top_titles, search_titles
from services.title_info_errors import (
    FetchBlockedError,
    InvalidIdentifierError,
    MediaNotFoundError,
    ParsePatternMismatchError,
    SourceFetchError,
    TitleInfoError,
    UnsupportedSourceError,
    format_user_error,
)
from services.title_info_service import list_supported_sources, resolve_title_info_sync
from services.title_refresh_service import schedule_title_refresh

titles_bp = Blueprint('titles', __name__)

_ERROR_STATUS = {
    UnsupportedSourceError: 422,
    InvalidIdentifierError: 422,
    MediaNotFoundError: 404,
    FetchBlockedError: 502,
    ParsePatternMismatchError: 502,
    SourceFetchError: 502,
}


def _error_response(status_code: int, code: str, message: str):
    return (
        jsonify({'success': False, 'error': {'code': code, 'message': message}}),
        status_code,
    )


def _status_for(exc: TitleInfoError) -> int:
    for error_type, status_code in _ERROR_STATUS.items():
        if isinstance(exc, error_type):
            return status_code
    return 500


@titles_bp.route('/api/titles/resolve', methods=['POST'])
def resolve_title():
    """URL 하나를 받아 제목/표지/회차 수/유형을 돌려줍니다."""
    data = request.get_json(silent=True) or {}
    url = data.get('url')
    if not isinstance(url, str) or not url.strip():
        return _error_response(400, 'INVALID_REQUEST', 'url is required.')

    try:
        info = resolve_title_info_sync(url.strip())
    except TitleInfoError as exc:
        current_app.logger.warning("Title resolution failed for %s: %s", url, exc)
        return _error_response(_status_for(exc), exc.code, format_user_error(exc))
    except Exception as exc:
        current_app.logger.exception("Unhandled error in resolve_title")
        return _error_response(500, 'INTERNAL_ERROR', format_user_error(exc))

    return jsonify({'success': True, 'data': info.to_dict()}), 200


@titles_bp.route('/api/titles/<owner_id>/<record_id>/refresh', methods=['POST'])
def refresh_title(owner_id, record_id):
    """저장된 작품의 회차 수 갱신을 백그라운드로 예약합니다."""
    schedule_title_refresh(owner_id, record_id)
    return jsonify({'success': True, 'scheduled': True}), 202


@titles_bp.route('/api/titles/sources', methods=['GET'])
def get_sources():
    return jsonify({'success': True, 'data': list_supported_sources()}), 200


@titles_bp.route('/api/titles/top', methods=['GET'])
def get_top_titles():
    kind = request.args.get('type', 'ANIME').strip().upper()
    if kind not in TOP_KINDS:
        return _error_response(400, 'INVALID_REQUEST', f"type must be one of {', '.join(TOP_KINDS)}.")

    titles = asyncio.run(fetch_top_titles(kind))
    return jsonify({'success': True, 'data': [title.to_dict() for title in titles]}), 200


@titles_bp.route('/api/titles/search', methods=['GET'])
def search():
    query = request.args.get('q', '').strip()
    if not query:
        return jsonify({'success': True, 'data': []}), 200

    titles = asyncio.run(search_titles(query))
    return jsonify({'success': True, 'data': [title.to_dict() for title in titles]}), 200
