"""Find comic archives readers cannot open (RAR5 or solid) and repack them as CBZ."""

__version__ = "1.0.0"
