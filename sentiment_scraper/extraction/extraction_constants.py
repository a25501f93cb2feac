"""Constants and thresholds for content extraction."""

import re

# Shared content-quality gate
MIN_CONTENT_LENGTH = 100
NOISE_SAMPLE_LENGTH = 200
NOISE_PATTERNS = [
    re.compile(r'^(search results|no results found|page not found)', re.IGNORECASE),
    re.compile(r'^(404|error|access denied)', re.IGNORECASE),
    re.compile(r'^(home\s+about\s+contact|privacy\s+terms)', re.IGNORECASE),
]

# Paragraph filtering used by the DOM and regex passes
MIN_PARAGRAPH_LENGTH = 30
BOILERPLATE_PREFIX = re.compile(r'^(share|follow|subscribe|download|read more|click here)', re.IGNORECASE)
SOCIAL_MARKERS = ('facebook', 'twitter', 'instagram', 'newsletter')

# Author / title cleanup
AUTHOR_PREFIX = re.compile(r'^(by|author|written by):?\s*', re.IGNORECASE)
MIN_AUTHOR_LENGTH = 2
MAX_AUTHOR_LENGTH = 100
MIN_TITLE_LENGTH = 5

# Generic extractor thresholds
GENERIC_MIN_CANDIDATE_LENGTH = 300
GENERIC_GOOD_ENOUGH_LENGTH = 1000
GENERIC_FALLBACK_THRESHOLD = 500
GENERIC_MIN_PARAGRAPH_LENGTH = 50
GENERIC_BODY_PARAGRAPH_LENGTH = 100
GENERIC_MAX_CONTENT_LENGTH = 12000
GENERIC_MIN_CONTENT_LENGTH = 300
GENERIC_NOISE_SAMPLE_LENGTH = 300
SHORT_PHRASE_LENGTH = 30
SHORT_PHRASE_RATIO = 0.7
SHORT_PHRASE_MIN_COUNT = 10
