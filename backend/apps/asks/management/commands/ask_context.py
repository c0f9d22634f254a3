"""
Resolve and print the conversation context for an ASK session.

Goes through the same locator and assembler as the HTTP endpoint, so the
output is what an agent would receive.

Usage:
    python manage.py ask_context team-2024
    python manage.py ask_context <invite-token>
    python manage.py ask_context team-2024 --profile <profile-uuid>
"""
import json
import uuid

from asgiref.sync import async_to_sync
from django.core.management.base import BaseCommand, CommandError

from apps.asks.context import ContextAssembler
from apps.asks.serializers import context_payload
from apps.asks.store import ConversationStore
from apps.common.exceptions import ProfileNotFound, StorageUnavailable, ThreadRaceConflict


class Command(BaseCommand):
    help = "Print the assembled conversation context for an ASK key or invite token as JSON."

    def add_arguments(self, parser):
        parser.add_argument('key_or_token', help="ASK key or participant invite token")
        parser.add_argument(
            '--profile',
            default=None,
            help="Profile UUID to resolve the context as (default: the token's participant, else anonymous)",
        )

    def handle(self, *args, **options):
        profile_id = None
        if options['profile']:
            try:
                profile_id = uuid.UUID(options['profile'])
            except ValueError:
                raise CommandError(f"--profile is not a valid UUID: {options['profile']}")

        try:
            payload = async_to_sync(self._resolve)(options['key_or_token'], profile_id)
        except (ProfileNotFound, StorageUnavailable, ThreadRaceConflict) as exc:
            raise CommandError(str(exc.detail))

        self.stdout.write(json.dumps(payload, indent=2))

    async def _resolve(self, key_or_token, profile_id):
        assembler = ContextAssembler(ConversationStore())
        lookup = await assembler.resolve_session(key_or_token)
        if lookup is None:
            raise CommandError(f"No ASK session found for '{key_or_token}'")

        if profile_id is not None and profile_id not in await assembler.store.get_users([profile_id]):
            raise CommandError(f"No profile found with id {profile_id}")

        requesting_user_id = profile_id or lookup.participant_user_id
        context = await assembler.assemble(lookup.session, requesting_user_id)
        return context_payload(context, lookup.matched_by, lookup.participant_id)
