"""
Trilines rules engine.
Dots, edges and triangles on a planar board; no web framework, persistence, or UI.
"""

DICE_SIDES = 6

# Randomized trials run by the feasibility estimator before each roll.
FEASIBILITY_TRIALS = 40

# Tolerance for orientation and bounding-box tests, in normalized board units
# (the board's larger extent is 1.0).
GEOMETRY_EPSILON = 1e-9

MAX_PLAYERS = 2
