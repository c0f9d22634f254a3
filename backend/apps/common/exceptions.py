"""
Custom exceptions for the Ask backend

Each exception is an APIException so views can let them propagate and DRF
(or the async views' error handling) maps them to a status code. The core
services raise them too: callers can tell "nothing to show" apart from
"infrastructure is down" by type alone.
"""
from rest_framework.exceptions import APIException


class AskSessionNotFound(APIException):
    """Raised when an ASK key or invite token does not resolve"""
    status_code = 404
    default_detail = 'ASK session not found'
    default_code = 'ask_session_not_found'


class MalformedAskKey(APIException):
    """Raised when an ASK key is blank or has an invalid format"""
    status_code = 400
    default_detail = 'Invalid ASK key format'
    default_code = 'malformed_ask_key'


class InviteTokenMismatch(APIException):
    """Raised when an invite token belongs to a different ASK session"""
    status_code = 403
    default_detail = 'Invite token does not belong to this ASK session'
    default_code = 'invite_token_mismatch'


class ProfileNotFound(APIException):
    """Raised when a requesting user id has no matching profile"""
    status_code = 404
    default_detail = 'Profile not found'
    default_code = 'profile_not_found'


class ThreadRaceConflict(APIException):
    """
    Raised when a conversation thread insert loses a uniqueness race.

    The thread resolver handles it with one re-fetch; it only escapes
    when that re-fetch also comes back empty.
    """
    status_code = 409
    default_detail = 'Conversation thread creation conflicted with a concurrent request'
    default_code = 'thread_race_conflict'


class StorageUnavailable(APIException):
    """Raised when the data store fails for reasons other than absence or uniqueness"""
    status_code = 503
    default_detail = 'Conversation storage is unavailable'
    default_code = 'storage_unavailable'
