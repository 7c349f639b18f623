"""Brand answer analysis.

Lexicon-based pipeline for one raw answer from an AI answer engine:
  1. Brand mention detection
  2. Brand sentiment (5-point) and overall sentiment (3-point)
  3. Confidence heuristic, topic tags and word count
  4. URL citation extraction
  5. Visibility score draw for the keyword/platform pair

Input:  answer text + Lexicon
Output: ClassifiedAnswer (persisted as an Analysis row)
"""
