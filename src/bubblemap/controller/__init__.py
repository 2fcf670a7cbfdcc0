"""
Interaction Engine
==================
Turns raw pointer input and the frame clock into transform updates and
selections.

Why is this file needed?
------------------------
1. Gestures: Tap / drag / pinch / wheel disambiguation (gestures.py).
2. Selection: Nearest-node lookup on animated positions (hit_test.py).
3. Timing: The frame scheduler abstraction (scheduler.py), so everything
   can be driven synchronously in tests.

Note: Only scheduler.py touches Qt (for its QTimer).
"""
