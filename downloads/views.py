import json

from django.core.exceptions import ValidationError
from django.core.validators import URLValidator
from django.http import HttpResponse, JsonResponse
from django.utils.http import content_disposition_header
from django.views.decorators.csrf import csrf_exempt
from django.views.decorators.http import require_http_methods

from downloads.service.config import get_log_path
from downloads.service.constants import OUTPUT_MIME_TYPE
from downloads.service.naming import derive_file_name
from downloads.service.transcode_service import (
    DirectLink,
    TranscodeRequest,
    Transcoded,
    transcode_request,
)
from downloads.utils import file_logger


def _parse_json_body(request):
    try:
        payload = json.loads(request.body or b'{}')
    except (ValueError, UnicodeDecodeError):
        return None
    if not isinstance(payload, dict):
        return None
    return payload


def _outcome_response(outcome, source_url, file_name):
    """Map a service outcome to an HTTP response."""
    if isinstance(outcome, DirectLink):
        return JsonResponse(
            {
                'success': True,
                'directDownload': True,
                'url': outcome.url,
                'fileName': outcome.file_name,
            }
        )

    if isinstance(outcome, Transcoded):
        response = HttpResponse(outcome.data, content_type=OUTPUT_MIME_TYPE)
        response['Content-Disposition'] = content_disposition_header(True, outcome.file_name)
        response['Content-Length'] = str(outcome.byte_length)
        return response

    return JsonResponse(
        {
            'success': False,
            'error': 'HLS stream conversion failed',
            'reason': outcome.reason.value,
            'diagnostic': outcome.diagnostic,
            'suggestion': 'Try one of the following tools to download the HLS stream',
            'methods': [entry.to_dict() for entry in outcome.advisory],
            'videoUrl': source_url,
            'fileName': file_name,
        }
    )


@csrf_exempt
@require_http_methods(['GET', 'POST'])
def download_view(request):
    """
    Download endpoint.

    POST (JSON body):
        videoUrl (required): Source URL
        fileName (optional): Name hint for the downloaded file

    Returns:
        - JSON with directDownload=true for progressive formats
        - The remuxed MP4 as an attachment for HLS streams
        - JSON with success=false and alternative tools if conversion fails

    GET:
        taskId (required): Task id to report on. There is no task store;
        the reply is always 'completed'.
    """
    if request.method == 'GET':
        return download_status_view(request)

    payload = _parse_json_body(request)
    if payload is None:
        return JsonResponse({'error': 'Request body must be a JSON object'}, status=400)

    video_url = payload.get('videoUrl')
    file_name = payload.get('fileName')

    if not video_url or not isinstance(video_url, str):
        return JsonResponse({'error': 'Missing required parameter: videoUrl'}, status=400)

    try:
        URLValidator()(video_url)
    except ValidationError:
        return JsonResponse({'error': 'Invalid videoUrl'}, status=400)

    if file_name is not None and not isinstance(file_name, str):
        file_name = str(file_name)

    try:
        outcome = transcode_request(
            TranscodeRequest(source_url=video_url, name_hint=file_name),
            logger=file_logger(get_log_path()),
        )
    except Exception as e:
        return JsonResponse(
            {'error': 'Internal server error', 'details': str(e)},
            status=500,
        )

    return _outcome_response(outcome, video_url, derive_file_name(file_name))


def download_status_view(request):
    """Report the status of a download task (stub, nothing is persisted)."""
    task_id = request.GET.get('taskId')
    if not task_id:
        return JsonResponse({'error': 'Missing required parameter: taskId'}, status=400)

    return JsonResponse(
        {
            'taskId': task_id,
            'status': 'completed',
            'message': 'Download complete',
        }
    )
