from flask import Blueprint, request, jsonify, current_app

from .main import get_service

chat_bp = Blueprint('chat', __name__)

def get_message():
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        data = {}
    message = data.get('message')
    return message.strip() if isinstance(message, str) else message

@chat_bp.route('/api/chat', methods=['POST'])
def chat_endpoint():
    """Answer a news question using web search context. Expects JSON body: {"message": "..."}"""
    payload, status = get_service('chat_service').answer(get_message())
    return jsonify(payload), status

@chat_bp.route('/api/chat/test', methods=['POST'])
def chat_test_endpoint():
    """Mock chat reply for health checks; calls no external API."""
    payload, status = get_service('chat_service').mock_answer(get_message())
    return jsonify(payload), status

@chat_bp.route('/api/voice-to-text', methods=['POST'])
def voice_to_text():
    """Transcribe the multipart 'audio' upload."""
    audio_file = request.files.get('audio')
    if audio_file is None:
        return jsonify({"error": "No audio file uploaded"}), 400

    audio = audio_file.read()
    if not audio:
        current_app.logger.warning("Empty audio upload received")
        return jsonify({"error": "No audio file uploaded"}), 400

    payload, status = get_service('chat_service').transcribe(
        audio,
        audio_file.mimetype or 'audio/webm',
        filename=audio_file.filename or 'audio.webm'
    )
    return jsonify(payload), status
