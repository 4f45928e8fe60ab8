"""cuelock core: cue sequence models, the lock/recompute engine and order sync."""
