#!/usr/bin/env python3
"""
Live gesture viewer - shows the classifier output and finger states per frame.
Useful for checking how a pose is being read before holding it.
"""

import sys
from pathlib import Path

import cv2

# Add src to path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from handsign.capture.camera import Camera
from handsign.config import load_config
from handsign.detection.hand_detector import HandDetector
from handsign.errors import CameraError
from handsign.recognition.gesture_classifier import GestureClassifier, finger_states
from handsign.utils.visualization import Visualizer


def main():
    print("Gesture Viewer")
    print("=" * 50)
    print("Press 'q' to quit")
    print("=" * 50)

    config = load_config()
    camera = Camera(config.camera)
    detector = HandDetector(config.mediapipe)
    classifier = GestureClassifier(config.recognition)
    visualizer = Visualizer(config.visualization)

    try:
        camera.start()
    except CameraError as e:
        print(e)
        return 1
    if not detector.start():
        camera.stop()
        return 1

    last_label = None
    try:
        while True:
            frame = camera.read()
            if frame is None:
                if cv2.waitKey(1) & 0xFF == ord('q'):
                    break
                continue

            hand = detector.detect_first(frame.rgb, int(frame.timestamp_ms))
            result = classifier.classify(hand)
            display = frame.image.copy()

            if hand is not None:
                visualizer.draw_hand(display, hand)
                fingers = finger_states(hand)
                finger_text = "Fingers: " + " ".join(
                    name[0].upper() for name in ("thumb", "index", "middle", "ring", "pinky")
                    if getattr(fingers, name))
                cv2.putText(display, finger_text, (20, 90),
                            cv2.FONT_HERSHEY_SIMPLEX, 0.6, (255, 255, 255), 1)
            else:
                cv2.putText(display, "No hand detected", (20, 50),
                            cv2.FONT_HERSHEY_SIMPLEX, 1.0, (0, 0, 255), 2)

            visualizer.draw_classification(display, result)

            if result.label != last_label:
                print("Detected: {} ({}%)".format(result.word or "None", result.confidence))
                last_label = result.label

            cv2.imshow("Gesture Viewer", display)

            if cv2.waitKey(1) & 0xFF == ord('q'):
                break

    finally:
        camera.stop()
        detector.stop()
        cv2.destroyAllWindows()
    return 0


if __name__ == "__main__":
    sys.exit(main())
