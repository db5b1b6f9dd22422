"""Unit tests for the shared voice catalog."""

import threading

import pytest

from linguacare.exceptions import VoiceLoadTimeoutError
from linguacare.models.speech import LoadState
from linguacare.speech.catalog import VoiceCatalog


def make_catalog(engine, **kwargs):
    kwargs.setdefault("poll_interval_seconds", 0.01)
    kwargs.setdefault("max_poll_attempts", 20)
    return VoiceCatalog(engine, **kwargs)


@pytest.mark.unit
class TestVoiceCatalog:
    """Test loading and caching of the engine voice list."""

    def test_initial_state(self, make_speech_engine):
        catalog = make_catalog(make_speech_engine())
        assert catalog.state is LoadState.NOT_STARTED
        assert catalog.voices == ()

    def test_immediate_voices(self, make_speech_engine, sample_voices):
        """Test voices available on the first query resolve without listening."""
        engine = make_speech_engine(sample_voices)
        catalog = make_catalog(engine)

        voices = catalog.load()

        assert voices == tuple(sample_voices)
        assert catalog.state is LoadState.READY
        assert engine.listener_registrations == 0

    def test_ready_catalog_is_cached(self, make_speech_engine, sample_voices):
        """Test later loads return the same result without querying the engine."""
        engine = make_speech_engine(sample_voices)
        catalog = make_catalog(engine)

        first = catalog.load()
        second = catalog.load()

        assert first is second
        assert engine.list_calls == 1

    def test_voices_found_by_polling(self, make_speech_engine, sample_voices):
        """Test an engine that reports voices only on a later query."""
        engine = make_speech_engine(sample_voices, empty_until_call=3)
        catalog = make_catalog(engine)

        assert catalog.load() == tuple(sample_voices)
        assert engine.list_calls == 4
        assert engine.listeners == []

    def test_voices_changed_notification(self, make_speech_engine, sample_voices, wait_for):
        """Test the voices-changed notification resolves a pending load."""
        engine = make_speech_engine()
        catalog = make_catalog(engine, poll_interval_seconds=0.05, max_poll_attempts=200)
        results = []

        loader = threading.Thread(target=lambda: results.append(catalog.load()))
        loader.start()
        assert wait_for(lambda: engine.listeners)
        engine.publish_voices(sample_voices)
        loader.join(timeout=5.0)

        assert results == [tuple(sample_voices)]
        assert catalog.state is LoadState.READY
        assert engine.listeners == []

    def test_concurrent_loads_share_one_attempt(self, make_speech_engine, sample_voices, wait_for):
        """Test parallel callers join the in-flight load instead of starting another."""
        engine = make_speech_engine()
        catalog = make_catalog(engine, poll_interval_seconds=0.05, max_poll_attempts=200)
        results = []

        threads = [threading.Thread(target=lambda: results.append(catalog.load())) for _ in range(3)]
        for thread in threads:
            thread.start()
        assert wait_for(lambda: engine.listeners)
        engine.publish_voices(sample_voices)
        for thread in threads:
            thread.join(timeout=5.0)

        assert len(results) == 3
        assert all(r is results[0] for r in results)
        assert engine.listener_registrations == 1

    def test_timeout_marks_failed(self, make_speech_engine, caplog):
        """Test an engine that never reports voices fails the load."""
        engine = make_speech_engine()
        catalog = make_catalog(engine, poll_interval_seconds=0.001, max_poll_attempts=5)

        with pytest.raises(VoiceLoadTimeoutError, match="Timed out waiting for voices"):
            catalog.load()

        assert catalog.state is LoadState.FAILED
        assert engine.list_calls == 6
        assert engine.listeners == []
        assert "Timed out waiting for voices to load" in caplog.text

    def test_failed_load_is_retried(self, make_speech_engine, sample_voices):
        """Test a later load tries again after a failure."""
        engine = make_speech_engine()
        catalog = make_catalog(engine, poll_interval_seconds=0.001, max_poll_attempts=2)
        with pytest.raises(VoiceLoadTimeoutError):
            catalog.load()

        engine.voices = list(sample_voices)

        assert catalog.load() == tuple(sample_voices)
        assert catalog.state is LoadState.READY

    def test_unsupported_engine(self, make_speech_engine, sample_voices):
        """Test an unsupported engine resolves to an empty catalog without error."""
        engine = make_speech_engine(sample_voices, supported=False)
        catalog = make_catalog(engine)

        assert catalog.load() == ()
        assert catalog.state is LoadState.READY
        assert engine.list_calls == 0

    def test_diagnostics_logged_once(self, make_speech_engine, sample_voices, caplog):
        """Test the first successful load logs each voice and missing languages."""
        catalog = make_catalog(make_speech_engine(sample_voices))

        catalog.load()
        catalog.load()

        assert caplog.text.count("TTS Diagnostics") == 1
        assert "Voice: Google Tamil, Lang: ta-IN" in caplog.text
        assert "Malayalam (ml-IN) voice may not be available" in caplog.text
        assert "Tamil (ta-IN) voice may not be available" not in caplog.text

    def test_engine_error_fails_load(self, make_speech_engine, sample_voices, caplog):
        """Test an engine that raises while listing voices fails the load instead of leaving it pending."""
        engine = make_speech_engine(sample_voices)
        list_voices = engine.list_voices
        calls = []

        def flaky_list_voices():
            calls.append(1)
            if len(calls) == 1:
                raise RuntimeError("driver not ready")
            return list_voices()

        engine.list_voices = flaky_list_voices
        catalog = make_catalog(engine)

        with pytest.raises(VoiceLoadTimeoutError) as exc_info:
            catalog.load()

        assert isinstance(exc_info.value.__cause__, RuntimeError)
        assert catalog.state is LoadState.FAILED
        assert "driver not ready" in caplog.text

        results = []
        retry = threading.Thread(target=lambda: results.append(catalog.load()))
        retry.start()
        retry.join(timeout=2.0)

        assert not retry.is_alive()
        assert results == [tuple(sample_voices)]
        assert catalog.state is LoadState.READY

    def test_listener_registration_error(self, make_speech_engine):
        engine = make_speech_engine()

        def refuse(callback):
            raise OSError("no notification support")

        engine.add_voices_changed_listener = refuse
        catalog = make_catalog(engine)

        with pytest.raises(VoiceLoadTimeoutError):
            catalog.load()

        assert catalog.state is LoadState.FAILED

    def test_waiters_released_when_owner_fails(self, make_speech_engine, wait_for):
        """Test callers waiting on an in-flight load are not left blocked when it errors."""
        engine = make_speech_engine()
        catalog = make_catalog(engine, poll_interval_seconds=0.05, max_poll_attempts=200)
        errors = []

        def load():
            try:
                catalog.load()
            except VoiceLoadTimeoutError as e:
                errors.append(e)

        owner = threading.Thread(target=load)
        owner.start()
        assert wait_for(lambda: engine.listeners)
        waiter = threading.Thread(target=load)
        waiter.start()

        def broken_list_voices():
            raise RuntimeError("audio service restarted")

        engine.list_voices = broken_list_voices
        owner.join(timeout=5.0)
        waiter.join(timeout=5.0)

        assert not owner.is_alive()
        assert not waiter.is_alive()
        assert len(errors) == 2
        assert catalog.state is LoadState.FAILED
