import logging
from flask import Blueprint, current_app, jsonify, request
from sqlalchemy.exc import SQLAlchemyError

from trackmeta.domain.catalog import CatalogError
from trackmeta.domain.tracks import TrackRepository, TrackStoreError

logger = logging.getLogger(__name__)

track_bp = Blueprint('track_bp', __name__)


def get_ingest_service():
    return current_app.extensions['track_ingest']


def get_track_repository() -> TrackRepository:
    return current_app.extensions['track_repository']


@track_bp.route('/fetch-and-store', methods=['POST'])
def fetch_and_store():
    isrc = (request.args.get('isrc') or '').strip()
    if not isrc:
        return jsonify({"error": "ISRC parameter is required"}), 400

    try:
        track = get_ingest_service().fetch_and_store(isrc)
    except (CatalogError, TrackStoreError) as e:
        logger.warning("fetch-and-store failed for ISRC %s: %s", isrc, e)
        return jsonify({"error": str(e)}), 500

    return jsonify(track.to_dict(include_id=False)), 200


@track_bp.route('/track/<isrc>', methods=['GET'])
def get_by_isrc(isrc):
    try:
        track = get_track_repository().find_by_isrc(isrc)
    except SQLAlchemyError as e:
        logger.error("Failed to retrieve track %s: %s", isrc, e, exc_info=True)
        return jsonify({"error": "Failed to retrieve track"}), 500
    if track is None:
        return jsonify({"error": "Track not found"}), 404
    return jsonify(track.to_dict()), 200


@track_bp.route('/tracks-by-artist/<path:artist>', methods=['GET'])
def get_by_artist_name(artist):
    try:
        tracks = get_track_repository().find_by_artist_name(artist)
    except SQLAlchemyError as e:
        logger.error("Failed to retrieve tracks for artist '%s': %s", artist, e, exc_info=True)
        return jsonify({"error": "Failed to retrieve tracks"}), 500
    return jsonify([track.to_dict() for track in tracks]), 200
