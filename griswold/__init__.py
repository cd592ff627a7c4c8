"""
Griswold - light choreography against an audio track.

Actors carry sparse keyframe curves that are interpolated, undone/redone,
sampled into cue lists and saved as versioned ``.gris`` project files.
"""

__version__ = "0.2.0"
