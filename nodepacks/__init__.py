"""Node packs bundled with this distribution."""
