#!/usr/bin/env python3
"""
Camera detection utility.
Lists working cameras and suggests front/back device ids for config.yaml.
"""

import os
import sys
from pathlib import Path

# Add src to path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from handsign.capture.camera import probe_devices


def list_video_devices():
    """List all /dev/video* device nodes (Linux only)."""
    return [
        "/dev/video{}".format(i)
        for i in range(10)
        if os.path.exists("/dev/video{}".format(i))
    ]


def main():
    print("=" * 60)
    print("CAMERA DETECTION")
    print("=" * 60)

    nodes = list_video_devices()
    if nodes:
        print("\nDevice nodes: {}".format(", ".join(nodes)))

    print("\nProbing camera indices...")
    working = probe_devices(max_index=max(5, len(nodes)))

    print("\n" + "=" * 60)
    if not working:
        print("No working cameras found.")
        print("\nTroubleshooting:")
        print("  1. Check the camera is connected and not used by another app")
        print("  2. On Linux, check permissions: ls -l /dev/video*")
        return 1

    print("Found {} working camera(s): {}".format(len(working), ", ".join(map(str, working))))
    print("\nTo use in config.yaml:")
    print("  camera:")
    print("    front_device_id: {}".format(working[0]))
    if len(working) > 1:
        print("    back_device_id: {}".format(working[1]))
    else:
        print("\nOnly one camera found; switching camera will have no effect.")
    return 0


if __name__ == "__main__":
    sys.exit(main())
