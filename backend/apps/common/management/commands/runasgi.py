"""
Serve the project through uvicorn so the async context views run on a
real event loop instead of a per-request one.

Usage: python manage.py runasgi [--host HOST] [--port PORT] [--no-reload]
"""
from django.core.management.base import BaseCommand, CommandError


class Command(BaseCommand):
    help = 'Run Django under uvicorn (ASGI) for the async ASK context endpoints'

    def add_arguments(self, parser):
        parser.add_argument('--host', default='127.0.0.1', help='Host to bind (default: 127.0.0.1)')
        parser.add_argument('--port', type=int, default=8000, help='Port to bind (default: 8000)')
        parser.add_argument('--no-reload', action='store_true', help='Disable auto-reload on code changes')
        parser.add_argument(
            '--log-level',
            default='info',
            choices=['critical', 'error', 'warning', 'info', 'debug'],
            help='uvicorn log level (default: info)',
        )

    def handle(self, *args, **options):
        try:
            import uvicorn
        except ImportError:
            raise CommandError('uvicorn is not installed. Install with: pip install uvicorn')

        host = options['host']
        port = options['port']
        self.stdout.write(self.style.SUCCESS(f'Serving config.asgi:application at http://{host}:{port}'))

        uvicorn.run(
            'config.asgi:application',
            host=host,
            port=port,
            reload=not options['no_reload'],
            log_level=options['log_level'],
            # Django's LOGGING dict owns the log format
            log_config=None,
        )
