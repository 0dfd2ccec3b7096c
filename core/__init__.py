"""Session clock, state machine and derived views for Blockfall."""
