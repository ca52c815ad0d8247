from typing import NewType


RenderedManifests = NewType("RenderedManifests", dict[str, str])
""" Rendered manifest text keyed by output name, in insertion order. """
