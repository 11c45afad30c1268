"""
Keyword extraction from video summaries.

English-dominant text is ranked by stop-word filtered term frequency,
everything else goes through jieba's TF-IDF extractor. Both paths fall back
to a plain frequency heuristic if they blow up, so ``extract_keywords``
never raises.
"""

import logging
import re
from collections import Counter
from typing import Iterable, List

import jieba.analyse

logger = logging.getLogger(__name__)

MAX_KEYWORDS = 15
MAX_FALLBACK_KEYWORDS = 10
MIN_WORD_LENGTH = 3

_ENGLISH_WORD_RE = re.compile(r"[a-zA-Z]+")
_LOWER_WORD_RE = re.compile(r"[a-z]+")
_CHINESE_CHAR_RE = re.compile(r"[\u4e00-\u9fff]")
_CHINESE_TERM_RE = re.compile(r"[\u4e00-\u9fff]{2,6}")

ENGLISH_STOP_WORDS = frozenset({
    "a", "about", "above", "after", "again", "against", "all", "also", "am",
    "an", "and", "any", "are", "around", "as", "at", "be", "because", "been",
    "before", "being", "below", "between", "both", "but", "by", "can",
    "could", "did", "do", "does", "doing", "down", "during", "each", "even",
    "every", "few", "first", "for", "from", "further", "get", "gets", "got",
    "had", "has", "have", "having", "he", "her", "here", "hers", "herself",
    "him", "himself", "his", "how", "however", "i", "if", "in", "into", "is",
    "it", "its", "itself", "just", "let", "like", "many", "may", "me",
    "might", "more", "most", "much", "must", "my", "myself", "new", "no",
    "nor", "not", "now", "of", "off", "on", "once", "one", "only", "or",
    "other", "our", "ours", "ourselves", "out", "over", "own", "really",
    "same", "say", "says", "she", "should", "so", "some", "such", "than",
    "that", "the", "their", "theirs", "them", "themselves", "then", "there",
    "these", "they", "this", "those", "through", "to", "too", "two", "under",
    "until", "up", "upon", "use", "used", "using", "very", "video", "was",
    "way", "we", "well", "were", "what", "when", "where", "which", "while",
    "who", "whom", "why", "will", "with", "within", "without", "would",
    "yet", "you", "your", "yours", "yourself", "yourselves",
})

# Reduced list for the fallback path
BASIC_ENGLISH_STOP_WORDS = frozenset({
    "the", "and", "for", "are", "but", "not", "you", "all", "can", "had",
    "her", "was", "one", "our", "out", "has", "his", "how", "its", "that",
    "this", "with", "have", "from", "they", "will", "your", "what", "when",
    "which", "there", "their", "about", "would", "been", "were", "into",
})

CHINESE_STOP_WORDS = frozenset({
    "我们", "你们", "他们", "她们", "它们", "这个", "那个", "这些", "那些",
    "这样", "那样", "什么", "怎么", "为什么", "因为", "所以", "但是", "而且",
    "然后", "如果", "虽然", "可以", "可能", "就是", "还是", "已经", "没有",
    "不是", "一个", "一些", "以及", "通过", "进行", "对于", "关于", "其中",
    "非常", "自己", "大家", "这里", "那里", "视频", "内容", "介绍", "主要",
})


def is_english_dominant(text: str) -> bool:
    """True when Latin words strictly outnumber CJK ideographs."""
    if not text:
        return False
    english_word_count = len(_ENGLISH_WORD_RE.findall(text))
    chinese_char_count = len(_CHINESE_CHAR_RE.findall(text))
    return english_word_count > chinese_char_count


def _count_english_words(text: str, stop_words: Iterable[str]) -> Counter:
    words = _LOWER_WORD_RE.findall(text.lower())
    return Counter(
        word for word in words
        if len(word) >= MIN_WORD_LENGTH and word not in stop_words
    )


def _quote_safe(terms: Iterable[str]) -> List[str]:
    return [term.replace('"', "'") for term in terms]


def extract_english_keywords(text: str) -> List[str]:
    counts = _count_english_words(text, ENGLISH_STOP_WORDS)
    # sorted() is stable, so equal (count, length) keep first-seen order
    ranked = sorted(counts.items(), key=lambda item: (-item[1], -len(item[0])))
    return [word for word, _ in ranked[:MAX_KEYWORDS]]


def extract_chinese_keywords(text: str) -> List[str]:
    tags = jieba.analyse.extract_tags(text, topK=MAX_KEYWORDS)
    return _quote_safe(tags)


def fallback_english_keywords(text: str) -> List[str]:
    counts = _count_english_words(text, BASIC_ENGLISH_STOP_WORDS)
    ranked = sorted(counts.items(), key=lambda item: -item[1])
    return [word for word, _ in ranked[:MAX_FALLBACK_KEYWORDS]]


def fallback_chinese_keywords(text: str) -> List[str]:
    counts = Counter(
        term for term in _CHINESE_TERM_RE.findall(text or "")
        if term not in CHINESE_STOP_WORDS
    )
    frequent = {term: count for term, count in counts.items() if count >= 2}
    table = frequent if len(frequent) >= 5 else counts
    ranked = sorted(table.items(), key=lambda item: (-item[1], -len(item[0])))
    return _quote_safe(term for term, _ in ranked[:MAX_FALLBACK_KEYWORDS])


def extract_keywords(summary: str) -> List[str]:
    """Ordered salient terms of ``summary``, at most 15."""
    text = summary or ""
    if is_english_dominant(text):
        try:
            return extract_english_keywords(text)
        except Exception as e:
            logger.warning(f"[KEYWORDS] English extraction failed, using fallback: {e}")
            return fallback_english_keywords(text)

    try:
        return extract_chinese_keywords(text)
    except Exception as e:
        logger.warning(f"[KEYWORDS] jieba extraction failed, using fallback: {e}")
        return fallback_chinese_keywords(text)
