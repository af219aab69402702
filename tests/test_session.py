"""
Tests for the Session Controller
=================================
"""

import threading
from unittest.mock import MagicMock

import pytest

from hand_factory import make_hand

from handsign.errors import CameraError
from handsign.recognition.gesture_classifier import GestureLabel
from handsign.recognition.hold_tracker import HoldTrackerConfig
from handsign.session import events
from handsign.session.controller import SessionController
from handsign.session.state import MESSAGE_PLACEHOLDER, Message, format_elapsed

FIST = make_hand()
PEACE = make_hand("index", "middle")
UNKNOWN = make_hand("thumb", "middle")


class FakeClock:
    """Monotonic clock driven by the test."""

    def __init__(self, start: float = 100.0):
        self.now = start

    def __call__(self) -> float:
        return self.now


class Recorder:
    """Collects emitted events in order."""

    def __init__(self, bus):
        self.events = []
        for name in (events.GESTURE_STARTED, events.WORD_COMMITTED,
                     events.DETECTION_RATE_UPDATED, events.NO_HAND_DETECTED,
                     events.MESSAGE_CLEARED, events.SESSION_STARTED,
                     events.SESSION_STOPPED, events.CAMERA_ERROR):
            bus.subscribe(name, self._handler(name))

    def _handler(self, name):
        def handler(**kwargs):
            self.events.append((name, kwargs))
        return handler

    def named(self, name):
        return [kwargs for event, kwargs in self.events if event == name]


def hold(controller, hand, start_ms, end_ms, step_ms=50):
    t = start_ms
    while t <= end_ms:
        controller.observe_frame(hand, t)
        t += step_ms


class TestSessionController:
    """Test suite for frame processing and user commands."""

    @pytest.fixture
    def clock(self):
        return FakeClock()

    @pytest.fixture
    def controller(self, clock):
        controller = SessionController(clock=clock)
        controller.start()
        return controller

    @pytest.fixture
    def recorder(self, controller):
        return Recorder(controller.bus)

    def test_start_without_camera(self, controller):
        assert controller.is_detecting
        assert controller.state.started_at == 100.0

    def test_gesture_start_counts_once(self, controller, recorder):
        hold(controller, PEACE, 0, 500)

        assert controller.state.gesture_count == 1
        started = recorder.named(events.GESTURE_STARTED)
        assert len(started) == 1
        assert started[0]["label"] == GestureLabel.PEACE
        assert started[0]["word"] == "PEACE"
        assert started[0]["confidence"] == 97

    def test_held_gesture_commits_word(self, controller, recorder):
        controller.observe_frame(FIST, 0)
        controller.observe_frame(FIST, 801)

        assert controller.state.message.words == ["STOP"]
        assert controller.state.word_count == 1
        assert recorder.named(events.WORD_COMMITTED) == [{"word": "STOP", "message": "STOP"}]

    def test_message_accumulates(self, controller):
        hold(controller, PEACE, 0, 900)
        controller.observe_frame(None, 950)
        hold(controller, FIST, 1000, 1850)

        assert controller.message_text() == "PEACE STOP"
        assert controller.state.gesture_count == 2

    def test_no_hand_event(self, controller, recorder):
        result = controller.observe_frame(None, 0)

        assert result.is_none
        assert len(recorder.named(events.NO_HAND_DETECTED)) == 1
        assert controller.stats().current_word == "None"

    def test_unmatched_pose_is_not_a_missing_hand(self, controller, recorder):
        result = controller.observe_frame(UNKNOWN, 0)

        assert result.is_none
        assert recorder.named(events.NO_HAND_DETECTED) == []
        assert recorder.named(events.GESTURE_STARTED) == []

    def test_detection_rate_counts_recognized_frames(self, controller, recorder):
        controller.observe_frame(PEACE, 0)
        controller.observe_frame(UNKNOWN, 10)
        controller.observe_frame(None, 20)
        controller.observe_frame(PEACE, 30000)
        controller.observe_frame(PEACE, 61000)

        rates = [e["count_per_minute"] for e in recorder.named(events.DETECTION_RATE_UPDATED)]
        assert rates == [1, 2, 2]
        assert controller.state.detection_rate == 2

    def test_detection_rate_decays_without_gestures(self, controller, recorder):
        """Old detections age out on frames with no recognized gesture."""
        controller.observe_frame(PEACE, 0)
        controller.observe_frame(None, 200000)

        rates = [e["count_per_minute"] for e in recorder.named(events.DETECTION_RATE_UPDATED)]
        assert rates == [1, 0]
        assert controller.stats().detection_rate == 0

    def test_flicker_prevents_commit(self, controller):
        hold(controller, FIST, 0, 700)
        controller.observe_frame(None, 750)
        hold(controller, FIST, 800, 1500)

        assert controller.state.message.words == []

    def test_clear_message(self, controller, recorder):
        hold(controller, FIST, 0, 2000)
        assert controller.state.word_count == 2

        controller.clear_message()

        assert controller.state.word_count == 0
        assert controller.state.message.words == []
        assert controller.stats().message == MESSAGE_PLACEHOLDER
        assert len(recorder.named(events.MESSAGE_CLEARED)) == 1

    def test_clear_does_not_touch_hold_state(self, controller):
        controller.observe_frame(FIST, 0)
        controller.observe_frame(FIST, 500)
        controller.clear_message()

        assert controller.tracker.last_label == GestureLabel.FIST
        controller.observe_frame(FIST, 801)
        assert controller.state.message.words == ["STOP"]
        assert controller.state.word_count == 1

    def test_stop_resets_hold_but_keeps_message(self, controller, recorder):
        hold(controller, FIST, 0, 850)
        controller.stop()

        assert not controller.is_detecting
        assert controller.tracker.last_label == GestureLabel.NONE
        assert controller.state.message.words == ["STOP"]
        assert controller.state.started_at is None
        assert len(recorder.named(events.SESSION_STOPPED)) == 1

    def test_run_consumes_frames(self, controller):
        frames = [(t, FIST) for t in range(0, 1000, 100)]

        assert controller.run(frames) == 10
        assert controller.state.message.words == ["STOP"]

    def test_run_stops_with_session(self, controller):
        def frames():
            yield 0, FIST
            controller.stop()
            yield 100, FIST
            yield 200, FIST

        assert controller.run(frames()) == 1

    def test_stats(self, controller, clock):
        hold(controller, PEACE, 0, 900)
        clock.now = 100.0 + 3725

        stats = controller.stats()

        assert stats.total_gestures == 1
        assert stats.words_formed == 1
        assert stats.current_word == "PEACE"
        assert stats.confidence == 97
        assert stats.elapsed_text == "01:02:05"
        assert stats.message == "PEACE"

    def test_event_handler_error_does_not_break_processing(self, controller):
        def broken(**kwargs):
            raise RuntimeError("boom")

        controller.bus.subscribe(events.WORD_COMMITTED, broken)
        controller.observe_frame(FIST, 0)
        controller.observe_frame(FIST, 900)

        assert controller.state.message.words == ["STOP"]

    def test_custom_hold_duration(self, clock):
        controller = SessionController(hold_config=HoldTrackerConfig(hold_duration_ms=200), clock=clock)
        controller.observe_frame(FIST, 0)
        controller.observe_frame(FIST, 201)

        assert controller.state.message.words == ["STOP"]

    def test_word_logger_history(self, controller):
        hold(controller, FIST, 0, 900)

        assert controller.word_logger.words == ["STOP"]


class TestSessionCamera:
    """Camera lifecycle through the controller."""

    def test_start_acquires_camera(self):
        camera = MagicMock()
        controller = SessionController(camera=camera)

        assert controller.start() is True
        camera.start.assert_called_once()

    def test_camera_failure_is_recoverable(self):
        camera = MagicMock()
        camera.start.side_effect = CameraError(0, "permission denied")
        controller = SessionController(camera=camera)
        recorder = Recorder(controller.bus)

        assert controller.start() is False
        assert not controller.is_detecting
        errors = recorder.named(events.CAMERA_ERROR)
        assert len(errors) == 1
        assert isinstance(errors[0]["error"], CameraError)

        camera.start.side_effect = None
        assert controller.start() is True

    def test_second_start_is_ignored(self):
        camera = MagicMock()
        controller = SessionController(camera=camera)
        controller.start()
        controller.start()

        camera.start.assert_called_once()

    def test_stop_during_start_cancels_start(self):
        """A stop that lands while the camera is opening wins over the start."""
        opening = threading.Event()
        release = threading.Event()
        camera = MagicMock()

        def slow_start():
            opening.set()
            release.wait(2.0)

        camera.start.side_effect = slow_start
        controller = SessionController(camera=camera)
        recorder = Recorder(controller.bus)
        results = []
        starter = threading.Thread(target=lambda: results.append(controller.start()))

        starter.start()
        assert opening.wait(2.0)
        controller.stop()
        release.set()
        starter.join(2.0)

        assert results == [False]
        assert not controller.is_detecting
        assert controller.state.started_at is None
        assert recorder.named(events.SESSION_STARTED) == []
        # Released again after the cancelled open finished
        assert camera.stop.call_count == 2

        camera.start.side_effect = None
        assert controller.start() is True

    def test_stop_releases_camera(self):
        camera = MagicMock()
        controller = SessionController(camera=camera)
        controller.start()
        controller.stop()

        camera.stop.assert_called_once()

    def test_switch_camera_resets_hold(self):
        camera = MagicMock()
        controller = SessionController(camera=camera)
        controller.start()
        controller.observe_frame(FIST, 0)

        assert controller.switch_camera() is True
        camera.switch_facing.assert_called_once()
        assert controller.tracker.last_label == GestureLabel.NONE

    def test_switch_camera_failure_stops_session(self):
        camera = MagicMock()
        camera.switch_facing.side_effect = CameraError(1)
        controller = SessionController(camera=camera)
        controller.start()

        assert controller.switch_camera() is False
        assert not controller.is_detecting

    def test_switch_without_camera(self):
        assert SessionController().switch_camera() is False


class TestMessageCommands:
    """Copy and speak commands."""

    @pytest.fixture
    def controller(self):
        controller = SessionController(clipboard=MagicMock(), speaker=MagicMock())
        controller.start()
        return controller

    def test_copy_message(self, controller):
        controller.clipboard.copy.return_value = True
        hold(controller, FIST, 0, 900)

        assert controller.copy_message() is True
        controller.clipboard.copy.assert_called_once_with("STOP")

    def test_copy_empty_message(self, controller):
        assert controller.copy_message() is False
        controller.clipboard.copy.assert_not_called()

    def test_speak_message(self, controller):
        controller.speaker.speak.return_value = True
        hold(controller, PEACE, 0, 900)

        assert controller.speak_message() is True
        controller.speaker.speak.assert_called_once_with("PEACE")

    def test_speak_empty_message(self, controller):
        assert controller.speak_message() is False
        controller.speaker.speak.assert_not_called()

    def test_no_backends(self):
        controller = SessionController()
        controller.state.message.append("YES")

        assert controller.copy_message() is False
        assert controller.speak_message() is False


class TestMessage:

    def test_text_and_placeholder(self):
        message = Message()
        assert message.display_text == MESSAGE_PLACEHOLDER
        assert not message

        message.append("HELLO")
        message.append("")
        message.append("YES")

        assert message.text == "HELLO YES"
        assert len(message) == 2

    @pytest.mark.parametrize("seconds, text", [
        (0, "00:00:00"),
        (59.9, "00:00:59"),
        (3600, "01:00:00"),
        (3725, "01:02:05"),
        (-5, "00:00:00"),
    ])
    def test_format_elapsed(self, seconds, text):
        assert format_elapsed(seconds) == text


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
