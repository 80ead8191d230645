"""
Replay Recorder and Loader.

Records each tick's snapshot and the command we answered with, so a match
can be replayed through the controller later. Because the controller is
deterministic, re-running a replay must give back the same commands.
"""

import json
import time
import os
import logging
from datetime import datetime, timezone

from .errors import ReplayError
from .snapshot import Game, UnitAction

logger = logging.getLogger('arenabot.replay')

REPLAY_DIR = "replays"


class ReplayRecorder:

    def __init__(self, match_id, bot_name, directory=None):
        self.match_id = match_id
        self.bot_name = bot_name
        self.ticks = []
        self.start_time = time.time()
        self.metadata = {
            'match_id': match_id,
            'bot_name': bot_name,
            'timestamp': datetime.now(timezone.utc).isoformat(),
            'duration': 0
        }

        directory = directory or REPLAY_DIR
        os.makedirs(directory, exist_ok=True)
        self.filepath = os.path.join(directory, f"{match_id}_{bot_name}.json")
        logger.info(f"Recording replay to {self.filepath}")

    def record_tick(self, game, unit, action):
        """Record the snapshot, the controlled unit and our command."""
        self.ticks.append({
            'tick': game.current_tick,
            'unit_id': unit.id,
            'game': game.to_dict(),
            'action': action.to_dict(),
        })

    def save(self):
        """Save replay to disk."""
        self.metadata['duration'] = time.time() - self.start_time
        self.metadata['tick_count'] = len(self.ticks)

        data = {
            'metadata': self.metadata,
            'ticks': self.ticks,
        }

        try:
            with open(self.filepath, 'w') as f:
                json.dump(data, f, indent=None)  # Compact JSON
            logger.info(f"Replay saved: {self.filepath} ({len(self.ticks)} ticks)")
            return True
        except OSError as e:
            logger.error(f"Failed to save replay: {e}")
            return False


class ReplayLoader:

    def __init__(self, filepath):
        self.filepath = filepath
        self.data = None

    def load(self):
        try:
            with open(self.filepath, 'r') as f:
                self.data = json.load(f)
            return True
        except (OSError, ValueError) as e:
            logger.error(f"Failed to load replay: {e}")
            return False

    def __len__(self):
        if not self.data:
            return 0
        return len(self.data['ticks'])

    def get_tick(self, index):
        if not self.data or index < 0 or index >= len(self.data['ticks']):
            return None
        return self.data['ticks'][index]

    def iter_ticks(self):
        """Yields (game, unit, recorded_action) for every tick."""
        if not self.data:
            raise ReplayError(f"replay not loaded: {self.filepath}")
        for entry in self.data['ticks']:
            game = Game.from_dict(entry['game'])
            unit = game.unit_by_id(entry['unit_id'])
            if unit is None:
                raise ReplayError(f"tick {entry['tick']}: unit {entry['unit_id']} not in snapshot")
            yield game, unit, UnitAction.from_dict(entry['action'])

    def summary(self):
        if not self.data:
            return {}
        meta = self.data['metadata']
        return {
            'duration': meta.get('duration', 0),
            'ticks': meta.get('tick_count', 0),
            'bot_name': meta.get('bot_name'),
        }


def verify_replay(loader, controller):
    """Re-run every recorded tick; return the ticks whose command changed."""
    mismatches = []
    for game, unit, recorded in loader.iter_ticks():
        action = controller.get_action(unit, game)
        if action != recorded:
            mismatches.append(game.current_tick)
    if mismatches:
        logger.warning(f"Replay {loader.filepath}: {len(mismatches)} ticks differ")
    return mismatches
