# vetscreen/emotion/__init__.py
# ==============================
# Emotion Sample Aggregator — VetScreen
#
# Public API:
#   - calculate_emotion_score() — weighted mean around the neutral baseline
#   - summarize_emotions()      — per-label count / percentage
#   - dominant_emotion()        — most frequent label

from vetscreen.emotion.aggregator import (  # noqa: F401
    EmotionLabel,
    EMOTION_WEIGHTS,
    calculate_emotion_score,
    summarize_emotions,
    dominant_emotion,
)
