"""Fantasy football projection and starting eleven optimizer."""
