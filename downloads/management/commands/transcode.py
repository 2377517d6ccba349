"""
Django management command for downloading a video.

This is a thin CLI wrapper around the transcode_service.
"""
import json
from pathlib import Path
from django.core.management.base import BaseCommand, CommandError

from downloads.service.naming import derive_file_name
from downloads.service.strategy import choose_download_strategy
from downloads.service.transcode_service import (
    DirectLink,
    InvalidTranscodeRequest,
    TranscodeRequest,
    Transcoded,
    transcode_request,
)


class Command(BaseCommand):
    help = 'Remux an HLS stream to MP4, or print the direct link for other URLs'

    def add_arguments(self, parser):
        parser.add_argument(
            'input',
            type=str,
            help='Video URL'
        )
        parser.add_argument(
            '--name',
            type=str,
            default=None,
            help='Output file name hint (sanitized, .mp4 is appended)'
        )
        parser.add_argument(
            '--outdir',
            type=str,
            default='.',
            help='Output directory (default: current directory)'
        )
        parser.add_argument(
            '--timeout',
            type=float,
            default=None,
            help='Seconds before ffmpeg is killed (default: VIDGRAB_TRANSCODE_TIMEOUT)'
        )
        parser.add_argument(
            '--dry-run',
            action='store_true',
            help='Show what would be done without running ffmpeg'
        )
        parser.add_argument(
            '--verbose',
            action='store_true',
            help='Enable verbose output'
        )
        parser.add_argument(
            '--json',
            action='store_true',
            help='Output result as JSON'
        )

    def handle(self, *args, **options):
        input_url = options['input']
        name_hint = options['name']
        outdir = Path(options['outdir'])
        dry_run = options['dry_run']
        verbose = options['verbose']
        output_json = options['json']

        if dry_run:
            strategy = choose_download_strategy(input_url)
            file_name = derive_file_name(name_hint)
            if output_json:
                self.stdout.write(json.dumps({
                    'dry_run': True,
                    'input': input_url,
                    'strategy': strategy,
                    'file_name': file_name,
                }, indent=2))
            else:
                self.stdout.write(self.style.WARNING("DRY RUN MODE - ffmpeg will not be run"))
                self.stdout.write(f"Input: {input_url}")
                self.stdout.write(f"Strategy: {strategy}")
                self.stdout.write(f"File name: {file_name}")
            return

        logger = self.stdout.write if verbose and not output_json else None

        try:
            outcome = transcode_request(
                TranscodeRequest(source_url=input_url, name_hint=name_hint),
                timeout=options['timeout'],
                logger=logger
            )
        except InvalidTranscodeRequest as e:
            raise CommandError(str(e))
        except Exception as e:
            raise CommandError(f"Transcode failed: {e}")

        if isinstance(outcome, DirectLink):
            if output_json:
                self.stdout.write(json.dumps({
                    'success': True,
                    'direct_download': True,
                    'url': outcome.url,
                    'file_name': outcome.file_name,
                }, indent=2))
            else:
                self.stdout.write(self.style.SUCCESS("Not an HLS stream, download it directly:"))
                self.stdout.write(f"  URL: {outcome.url}")
                self.stdout.write(f"  File name: {outcome.file_name}")
            return

        if isinstance(outcome, Transcoded):
            outdir.mkdir(parents=True, exist_ok=True)
            output_path = outdir / outcome.file_name
            output_path.write_bytes(outcome.data)

            if output_json:
                self.stdout.write(json.dumps({
                    'success': True,
                    'output_path': str(output_path),
                    'file_size': outcome.byte_length,
                }, indent=2))
            else:
                self.stdout.write(self.style.SUCCESS("✓ Conversion complete"))
                self.stdout.write(f"  Output: {output_path}")
                self.stdout.write(f"  Size: {outcome.byte_length:,} bytes")
            return

        if output_json:
            self.stdout.write(json.dumps({
                'success': False,
                'reason': outcome.reason.value,
                'diagnostic': outcome.diagnostic,
                'methods': [entry.to_dict() for entry in outcome.advisory],
            }, indent=2))
        else:
            self.stdout.write(self.style.ERROR(f"✗ Conversion failed ({outcome.reason.value})"))
            if verbose:
                self.stdout.write(outcome.diagnostic)
            self.stdout.write("\nTry one of these instead:")
            for entry in outcome.advisory:
                self.stdout.write(f"  {entry.tool_name}: {entry.description}")
                if entry.command:
                    self.stdout.write(f"    {entry.command}")
                if entry.install_hint:
                    self.stdout.write(f"    Install: {entry.install_hint}")
                if entry.note:
                    self.stdout.write(f"    {entry.note}")

        raise CommandError(f"Conversion failed: {outcome.reason.value}")
