"""logic — Game systems package.

Top-level modules
-----------------
pathfinding        — A* navigation (deterministic, stop-adjacent mode)
click_to_move      — path-following state machine
movement           — key/path arbitration, collision, walk cycle
player_controller  — per-tick driver + cancellation triggers
entity_factory     — entity creation from TOML data
input_manager      — raw input → intent mapping
"""
