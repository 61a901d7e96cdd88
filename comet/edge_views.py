"""
Serverless-style endpoints called directly by the browser client.

Both answer CORS preflight and carry permissive CORS headers on every
response, including errors.
"""

import logging
from functools import wraps

from django.http import HttpResponse, JsonResponse
from django.views.decorators.csrf import csrf_exempt

from .ai import GatewayError, TranscriptionError, transcribe_audio
from .http import BadRequest, json_body
from .recommendations import recommend_post_ids

logger = logging.getLogger(__name__)

CORS_HEADERS = {
    'Access-Control-Allow-Origin': '*',
    'Access-Control-Allow-Headers': 'authorization, x-client-info, apikey, content-type',
}


def _with_cors(response):
    for header, value in CORS_HEADERS.items():
        response[header] = value
    return response


def cors(view):
    """Answer OPTIONS preflight and add CORS headers to the view's response."""
    @csrf_exempt
    @wraps(view)
    def wrapper(request, *args, **kwargs):
        if request.method == "OPTIONS":
            return _with_cors(HttpResponse())
        if request.method != "POST":
            return _with_cors(JsonResponse({"error": "Method not allowed"}, status=405))
        return _with_cors(view(request, *args, **kwargs))
    return wrapper


@cors
def get_recommendations(request):
    try:
        user_id = json_body(request).get('userId')
    except BadRequest as e:
        return JsonResponse({"error": str(e)}, status=400)
    if user_id is None or user_id == '':
        return JsonResponse({"error": "userId is required"}, status=400)
    if isinstance(user_id, bool):
        return JsonResponse({"error": "userId must be an integer"}, status=400)
    try:
        user_id = int(user_id)
    except (TypeError, ValueError):
        return JsonResponse({"error": "userId must be an integer"}, status=400)

    try:
        ids = recommend_post_ids(user_id)
    except GatewayError as e:
        logger.error(f"Error in get-recommendations: {e}")
        return JsonResponse({"error": str(e)}, status=e.status)
    except Exception as e:
        logger.exception(f"Error in get-recommendations: {e}")
        return JsonResponse({"error": str(e)}, status=500)
    return JsonResponse({"recommendations": ids})


@cors
def transcribe_voice_note(request):
    audio = request.FILES.get('audio')
    if audio is None:
        logger.error("Error in transcribe-voice-note: no audio file")
        return JsonResponse({"error": "No audio file provided"}, status=500)

    try:
        result = transcribe_audio(audio)
    except TranscriptionError as e:
        logger.error(f"Error in transcribe-voice-note: {e}")
        return JsonResponse({"error": str(e)}, status=e.status)
    except Exception as e:
        logger.exception(f"Error in transcribe-voice-note: {e}")
        return JsonResponse({"error": str(e)}, status=500)

    logger.info(f"Transcription successful: {(result['text'] or '')[:50]}...")
    return JsonResponse(result)
