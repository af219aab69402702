"""Camera frame acquisition."""
from .camera import FACING_ENVIRONMENT, FACING_USER, Camera, CameraConfig, Frame, probe_devices

__all__ = ["FACING_ENVIRONMENT", "FACING_USER", "Camera", "CameraConfig", "Frame", "probe_devices"]
