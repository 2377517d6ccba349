"""
Tests for service/transcode_service.py

Integration tests for the main transcode service entrypoint.
"""

from django.test import TestCase, override_settings
from unittest.mock import patch
from pathlib import Path
import sys
import tempfile

from downloads.service import transcode_service
from downloads.service.process import TranscodeFailureKind, spawn_process
from downloads.service.transcode_service import (
    DirectLink,
    InvalidTranscodeRequest,
    TranscodeFailed,
    TranscodeInternalError,
    TranscodeRequest,
    Transcoded,
    allocate_output_path,
    transcode_request,
)
from downloads.test_service.fakes import FakeProcessHandle, FakeSpawner

HLS_URL = 'https://cdn.example/live/index.m3u8'


class TranscodeServiceTest(TestCase):
    """Integration tests for transcode service"""

    def setUp(self):
        self._temp_dir = tempfile.TemporaryDirectory()
        self.scratch_dir = Path(self._temp_dir.name)

    def tearDown(self):
        self._temp_dir.cleanup()

    def _leftovers(self):
        return list(self.scratch_dir.iterdir())

    def test_transcode_request_is_immutable(self):
        request = TranscodeRequest(source_url=HLS_URL)
        with self.assertRaises(AttributeError):
            request.source_url = 'https://example.com/other.m3u8'

    def test_missing_url_raises(self):
        spawner = FakeSpawner()
        for url in ('', '   ', None):
            with self.assertRaises(InvalidTranscodeRequest):
                transcode_request(
                    TranscodeRequest(source_url=url),
                    spawn=spawner,
                    scratch_dir=self.scratch_dir
                )
        self.assertFalse(spawner.called)

    def test_direct_link_never_spawns(self):
        spawner = FakeSpawner()
        url = 'https://example.com/videos/clip.mp4?sig=a%20b'

        outcome = transcode_request(
            TranscodeRequest(source_url=url, name_hint='Clip'),
            spawn=spawner,
            scratch_dir=self.scratch_dir
        )

        self.assertIsInstance(outcome, DirectLink)
        self.assertEqual(outcome.url, url)
        self.assertEqual(outcome.file_name, 'Clip.mp4')
        self.assertFalse(spawner.called)
        self.assertEqual(self._leftovers(), [])

    def test_hls_success_scenario(self):
        """Test the My Clip! scenario end to end with a 2048-byte output"""
        spawner = FakeSpawner(FakeProcessHandle(returncode=0), output=b'\x00' * 2048)

        outcome = transcode_request(
            TranscodeRequest(source_url=HLS_URL, name_hint='My Clip!'),
            spawn=spawner,
            scratch_dir=self.scratch_dir
        )

        self.assertIsInstance(outcome, Transcoded)
        self.assertEqual(outcome.file_name, 'My Clip.mp4')
        self.assertEqual(outcome.byte_length, 2048)
        self.assertEqual(len(outcome.data), 2048)

        # ffmpeg was given the URL as input and a temp path as output
        self.assertEqual(len(spawner.calls), 1)
        cmd = spawner.calls[0]
        self.assertEqual(cmd[cmd.index('-i') + 1], HLS_URL)
        output_path = Path(cmd[-1])
        self.assertEqual(output_path.parent, self.scratch_dir)
        self.assertTrue(output_path.name.endswith('_My Clip.mp4'))

        self.assertFalse(output_path.exists())
        self.assertEqual(self._leftovers(), [])

    def test_non_zero_exit_returns_advisory(self):
        # ffmpeg leaves a partial file behind before failing
        handle = FakeProcessHandle(returncode=1, stderr_chunks=[b'Server returned 403\n'])
        spawner = FakeSpawner(handle, output=b'partial')

        outcome = transcode_request(
            TranscodeRequest(source_url=HLS_URL, name_hint='clip'),
            spawn=spawner,
            scratch_dir=self.scratch_dir
        )

        self.assertIsInstance(outcome, TranscodeFailed)
        self.assertEqual(outcome.reason, TranscodeFailureKind.NON_ZERO_EXIT)
        self.assertIn('403', outcome.diagnostic)
        self.assertEqual(len(outcome.advisory), 4)
        self.assertIn(HLS_URL, outcome.advisory[0].command)
        self.assertIn('"clip.mp4"', outcome.advisory[0].command)
        self.assertEqual(self._leftovers(), [])

    def test_spawn_error_returns_advisory(self):
        spawner = FakeSpawner(error=FileNotFoundError(2, 'No such file or directory', 'ffmpeg'))

        outcome = transcode_request(
            TranscodeRequest(source_url=HLS_URL),
            spawn=spawner,
            scratch_dir=self.scratch_dir
        )

        self.assertIsInstance(outcome, TranscodeFailed)
        self.assertEqual(outcome.reason, TranscodeFailureKind.PROCESS_SPAWN_ERROR)
        self.assertTrue(outcome.advisory)
        self.assertIn('video.mp4', outcome.advisory[1].command)

    def test_hang_times_out_and_kills(self):
        handle = FakeProcessHandle(hang=True)
        spawner = FakeSpawner(handle, output=b'partial')

        outcome = transcode_request(
            TranscodeRequest(source_url=HLS_URL),
            timeout=0.2,
            spawn=spawner,
            scratch_dir=self.scratch_dir
        )

        self.assertIsInstance(outcome, TranscodeFailed)
        self.assertEqual(outcome.reason, TranscodeFailureKind.TIMEOUT)
        self.assertEqual(outcome.diagnostic, 'conversion timed out')
        self.assertTrue(handle.killed.is_set())
        self.assertEqual(self._leftovers(), [])

    def test_missing_output_is_unreadable(self):
        """Test that exit 0 without an output file becomes a failure"""
        spawner = FakeSpawner(FakeProcessHandle(returncode=0))

        outcome = transcode_request(
            TranscodeRequest(source_url=HLS_URL),
            spawn=spawner,
            scratch_dir=self.scratch_dir
        )

        self.assertIsInstance(outcome, TranscodeFailed)
        self.assertEqual(outcome.reason, TranscodeFailureKind.PROCESS_SPAWN_ERROR)
        self.assertTrue(outcome.diagnostic.startswith('output unreadable'))
        self.assertEqual(len(outcome.advisory), 4)

    def test_exactly_one_cleanup_attempt(self):
        spawner = FakeSpawner(FakeProcessHandle(returncode=0), output=b'data')

        with patch(
            'downloads.service.transcode_service.discard_output',
            wraps=transcode_service.discard_output
        ) as mock_discard:
            transcode_request(
                TranscodeRequest(source_url=HLS_URL),
                spawn=spawner,
                scratch_dir=self.scratch_dir
            )

        mock_discard.assert_called_once()
        self.assertEqual(Path(mock_discard.call_args[0][0]), Path(spawner.calls[0][-1]))

    def test_cleanup_runs_when_read_raises(self):
        spawner = FakeSpawner(FakeProcessHandle(returncode=0), output=b'data')

        with patch.object(Path, 'read_bytes', side_effect=PermissionError('denied')):
            outcome = transcode_request(
                TranscodeRequest(source_url=HLS_URL),
                spawn=spawner,
                scratch_dir=self.scratch_dir
            )

        self.assertIsInstance(outcome, TranscodeFailed)
        self.assertIn('denied', outcome.diagnostic)
        self.assertEqual(self._leftovers(), [])

    def test_cleanup_failure_is_swallowed(self):
        spawner = FakeSpawner(FakeProcessHandle(returncode=0), output=b'data')
        messages = []

        with patch.object(Path, 'unlink', side_effect=PermissionError('busy')) as mock_unlink:
            outcome = transcode_request(
                TranscodeRequest(source_url=HLS_URL),
                spawn=spawner,
                scratch_dir=self.scratch_dir,
                logger=messages.append
            )

        self.assertIsInstance(outcome, Transcoded)
        self.assertEqual(outcome.data, b'data')
        mock_unlink.assert_called_once()
        self.assertTrue(any(m.startswith('Warning: could not delete') for m in messages))

    def test_missing_scratch_dir_is_internal_error(self):
        spawner = FakeSpawner()

        with self.assertRaises(TranscodeInternalError):
            transcode_request(
                TranscodeRequest(source_url=HLS_URL),
                spawn=spawner,
                scratch_dir=self.scratch_dir / 'missing'
            )

        self.assertFalse(spawner.called)

    @override_settings(VIDGRAB_SCRATCH_DIR='/nonexistent/vidgrab-scratch')
    def test_scratch_dir_from_settings(self):
        with self.assertRaises(TranscodeInternalError):
            allocate_output_path('clip.mp4')

    def test_allocated_paths_are_unique(self):
        paths = {allocate_output_path('clip.mp4', self.scratch_dir) for _ in range(50)}
        self.assertEqual(len(paths), 50)
        for path in paths:
            self.assertTrue(path.name.endswith('_clip.mp4'))

    def test_verbose_logging(self):
        messages = []
        transcode_request(
            TranscodeRequest(source_url=HLS_URL),
            spawn=FakeSpawner(FakeProcessHandle(returncode=0), output=b'data'),
            scratch_dir=self.scratch_dir,
            logger=messages.append
        )
        self.assertIn(f'Processing URL: {HLS_URL}', messages)
        self.assertIn('Strategy: hls', messages)

    def test_long_name_hint_fits_filesystem(self):
        """Test that a long title still yields a writable temporary file"""
        script = "import sys; open(sys.argv[1], 'wb').write(b'\\0' * 2048)"

        def spawn(args):
            return spawn_process([sys.executable, '-c', script, str(args[-1])])

        outcome = transcode_request(
            TranscodeRequest(source_url=HLS_URL, name_hint='视频' * 200),
            timeout=30,
            spawn=spawn,
            scratch_dir=self.scratch_dir
        )

        self.assertIsInstance(outcome, Transcoded)
        self.assertEqual(outcome.byte_length, 2048)
        self.assertLessEqual(len(outcome.file_name.encode('utf-8')), 200)
        self.assertEqual(self._leftovers(), [])
