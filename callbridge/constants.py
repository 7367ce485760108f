"""Game constants for Call Bridge."""

# Table
NUM_PLAYERS = 4
NUM_SEATS = 4
TRICKS_PER_ROUND = 13
CARDS_PER_HAND = 13

# Offline scoring
TOTAL_ROUNDS = 10
MIN_CALL = 2
MIN_CALL_TOTAL = TRICKS_PER_ROUND
SLAM_CALL = 8  # A made or called 8 scores SLAM_SCORE instead of 8
SLAM_SCORE = 13
DEFAULT_WINNING_SCORE = 50

# Local store key for the active offline game
LOCAL_STATE_KEY = "bridgeScore_gameState"
# Finished offline games not yet in the shared history
UNARCHIVED_KEY = "bridgeScore_unarchived"

# Publisher service
REDIS_PUBLISH_TIMEOUT = 5
