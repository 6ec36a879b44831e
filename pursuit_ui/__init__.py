"""Client side of the pursuit simulation: channel, session state and window."""
