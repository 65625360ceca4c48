"""Sample trigger capability and playback backends for the sequencer."""
from .sampler import SamplePlayer, SoundDeviceSampleBank, load_sample
from .trigger import RecordingSampleTrigger, SampleTrigger, TriggerCall

__all__ = [
    "RecordingSampleTrigger",
    "SamplePlayer",
    "SampleTrigger",
    "SoundDeviceSampleBank",
    "TriggerCall",
    "load_sample",
]
