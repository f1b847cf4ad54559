import pytest

# Prefix letters and the roots they complete. Every root ends up with
# exactly six one-letter prefixes:
#   at:  b c f h m p
#   ing: b c d m p r
#   ed:  b d f l m w
#   er:  b c d f h l
TOY_WORDS = [
    "bat", "bing", "bed", "ber",
    "cat", "cing", "cer",
    "ding", "ded", "der",
    "fat", "fed", "fer",
    "hat", "her",
    "led", "ler",
    "mat", "ming", "med",
    "pat", "ping",
    "ring",
    "wed",
]


@pytest.fixture
def toy_corpus():
    return list(TOY_WORDS)


@pytest.fixture
def word_file(tmp_path):
    path = tmp_path / "words.txt"
    path.write_text("\n".join(TOY_WORDS) + "\n", encoding="utf-8")
    return path
