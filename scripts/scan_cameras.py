#!/usr/bin/env python3
"""Probe camera indices to find the one pointed at the monitor."""
import sys

import cv2


def scan_cameras(max_index=5):
    found = []
    for index in range(max_index):
        cap = cv2.VideoCapture(index)
        if not cap.isOpened():
            cap.release()
            continue

        ret, frame = cap.read()
        if ret and frame is not None:
            height, width = frame.shape[:2]
            print(f"Camera {index}: {width}x{height}")
            found.append(index)
        else:
            print(f"Camera {index}: opened but returned no frame")
        cap.release()

    if not found:
        print("No cameras found")
    return found


if __name__ == "__main__":
    count = int(sys.argv[1]) if len(sys.argv) > 1 else 5
    sys.exit(0 if scan_cameras(count) else 1)
