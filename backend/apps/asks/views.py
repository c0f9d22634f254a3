"""
Asks views

Raw async Django views (DRF viewsets do not run async handlers), so
authentication and error mapping happen here instead of in DRF.
"""
import logging

from asgiref.sync import sync_to_async
from django.http import JsonResponse
from django.views.decorators.http import require_GET
from rest_framework.exceptions import APIException

from apps.common.exceptions import AskSessionNotFound, InviteTokenMismatch, MalformedAskKey
from apps.common.logging_utils import build_log_extra, mask_token

from .context import ContextAssembler
from .locator import is_valid_ask_key
from .serializers import context_payload
from .store import ConversationStore

logger = logging.getLogger(__name__)

INVITE_TOKEN_HEADER = 'HTTP_X_INVITE_TOKEN'


async def _authenticate_jwt(request):
    """Authenticate a raw Django request using JWT (for async views outside DRF)."""
    from rest_framework_simplejwt.authentication import JWTAuthentication
    from rest_framework_simplejwt.exceptions import InvalidToken, AuthenticationFailed as JWTAuthFailed

    auth_header = request.META.get('HTTP_AUTHORIZATION', '')
    if not auth_header.startswith('Bearer '):
        return None

    jwt_auth = JWTAuthentication()
    try:
        validated_token = await sync_to_async(jwt_auth.get_validated_token)(
            auth_header.split(' ', 1)[1]
        )
        user = await sync_to_async(jwt_auth.get_user)(validated_token)
        return user
    except (InvalidToken, JWTAuthFailed):
        return None


async def _resolve_requester(request, assembler, session):
    """
    (profile id, participant id) of whoever is asking. Both are None for
    anonymous access; participant id is only known from an invite token.

    An X-Invite-Token header wins over a bearer token and must belong to
    the session being read.
    """
    invite_token = (request.META.get(INVITE_TOKEN_HEADER) or '').strip()
    if invite_token:
        lookup = await assembler.locator.find_by_token(invite_token)
        if lookup is None or lookup.session.id != session.id:
            logger.warning(
                "invite_token_mismatch",
                extra=build_log_extra(ask_session_id=session.id, token=mask_token(invite_token)),
            )
            raise InviteTokenMismatch()
        return lookup.participant_user_id, lookup.participant_id

    user = await _authenticate_jwt(request)
    if user is None:
        return None, None
    return await assembler.store.get_profile_id_for_account(user.id), None


def _error_response(exc: APIException) -> JsonResponse:
    return JsonResponse(
        {'error': str(exc.detail), 'code': exc.default_code},
        status=exc.status_code,
    )


def _context_response(context, matched_by, participant_id=None) -> JsonResponse:
    return JsonResponse(context_payload(context, matched_by, participant_id))


@require_GET
async def ask_context(request, key):
    """
    Conversation context for an ASK session, located by its public key.

    GET /api/asks/{key}/context/
    Headers (optional):
        X-Invite-Token: participant invite token for this session
        Authorization: Bearer <jwt>
    """
    key = (key or '').strip()
    assembler = ContextAssembler(ConversationStore())
    try:
        if not is_valid_ask_key(key):
            raise MalformedAskKey()

        lookup = await assembler.locator.find_by_key(key)
        if lookup is None:
            raise AskSessionNotFound()

        requesting_user_id, participant_id = await _resolve_requester(request, assembler, lookup.session)
        context = await assembler.assemble(lookup.session, requesting_user_id)
    except APIException as exc:
        logger.info(
            "ask_context_request_failed",
            extra=build_log_extra(ask_key=key, status_code=exc.status_code, code=exc.default_code),
        )
        return _error_response(exc)

    return _context_response(context, lookup.matched_by, participant_id)


@require_GET
async def ask_context_by_token(request, token):
    """
    Conversation context for the participant holding an invite token.

    GET /api/asks/token/{token}/context/
    """
    assembler = ContextAssembler(ConversationStore())
    try:
        lookup = await assembler.locator.find_by_token(token)
        if lookup is None:
            raise AskSessionNotFound()

        context = await assembler.assemble(lookup.session, lookup.participant_user_id)
    except APIException as exc:
        logger.info(
            "ask_context_request_failed",
            extra=build_log_extra(token=mask_token(token), status_code=exc.status_code, code=exc.default_code),
        )
        return _error_response(exc)

    return _context_response(context, lookup.matched_by, lookup.participant_id)
