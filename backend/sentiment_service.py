from vaderSentiment.vaderSentiment import SentimentIntensityAnalyzer

from score_resolver import RawScore

analyzer = SentimentIntensityAnalyzer()

# VADER's proportion keys, in the order we report them
POLARITY_KEYS = ("neg", "neu", "pos")


def analyze_sentiment(text):
    """Local lexicon classifier: neg/neu/pos proportions as raw scores.

    The compound score is dropped; the three proportions sum to ~1 and are
    the same label/score shape a hosted classifier returns.
    """
    score = analyzer.polarity_scores(text)
    return [RawScore(key, float(score[key])) for key in POLARITY_KEYS]
