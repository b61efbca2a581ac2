"""Prompt builders for quality analysis and rewriting."""

from __future__ import annotations

import re
from collections.abc import Sequence

from app.jobs.models import QualityAnalysis

_TAG_RE = re.compile(r"<[^>]*>")

ANALYZER_SYSTEM = "Sen bir içerik kalite analiz uzmanısın. Yalnızca geçerli JSON döndür."
REWRITER_SYSTEM = "Sen deneyimli bir emlak içerik editörüsün. Yalnızca iyileştirilmiş metni döndür, açıklama ekleme."


def clean_content(text: str, limit: int) -> str:
  """Strip HTML tags and clamp the text to the prompt budget."""
  cleaned = _TAG_RE.sub(" ", text).strip()
  if len(cleaned) > limit:
    return cleaned[:limit] + "..."
  return cleaned


def render_analysis_prompt(text: str, title: str, keywords: Sequence[str] | None, *, limit: int) -> str:
  keyword_line = ", ".join(keywords) if keywords else "Yok"
  return f"""Aşağıdaki Türkçe içeriği editoryal ve SEO kriterlerine göre değerlendir.

Başlık: {title or "Başlıksız"}
Anahtar Kelimeler: {keyword_line}

İçerik:
{clean_content(text, limit)}

Değerlendirme kriterleri:
1. SEO uyumu (anahtar kelime kullanımı, yapı) - 0-100
2. Okunabilirlik (cümle uzunluğu, akıcılık) - 0-100
3. Bilgi değeri ve özgünlük - 0-100
4. Yapay zeka ile üretilmiş görünüm (kalıp ifadeler, tekrarlar) - true/false
5. İnsan yazısına benzerlik - 0-100
6. Yapı ve biçim (başlıklar, paragraflar, listeler) - 0-100

Sadece şu JSON yapısını döndür:
{{
  "score": 0-100,
  "passed": true/false,
  "issues": [
    {{"type": "ai-pattern|seo|readability|structure|engagement|uniqueness", "severity": "low|medium|high", "message": "Sorun", "suggestion": "Öneri"}}
  ],
  "suggestions": ["Öneri 1", "Öneri 2"],
  "aiGenerated": true/false,
  "humanLikeScore": 0-100,
  "seoScore": 0-100
}}"""


def render_rewrite_prompt(text: str, title: str, analysis: QualityAnalysis, *, limit: int) -> str:
  issue_lines = "\n".join(f"- {issue.message}: {issue.suggestion}" for issue in analysis.issues) or "- Belirgin sorun yok"
  suggestion_lines = "\n".join(analysis.suggestions) or "Yok"
  return f"""Aşağıdaki Türkçe içeriği analiz sonuçlarına göre iyileştir.

Başlık: {title or "Başlıksız"}
Orijinal İçerik:
{clean_content(text, limit)}

Mevcut Kalite Skoru: {analysis.score}/100
Tespit Edilen Sorunlar:
{issue_lines}

İyileştirme Önerileri:
{suggestion_lines}

Görevler:
1. Kalıp ifadeleri özgün ifadelerle değiştir
2. Tekrar eden kelimeler yerine eş anlamlılarını kullan
3. Kısa ve uzun cümleleri dengeli kullan
4. Doğal ve samimi bir ton kullan
5. Anahtar kelimeleri doğal biçimde yerleştir

Kurallar:
- Anlamı ve bilgi değerini koru
- Varsa HTML etiketlerini koru
- Türkçe karakterleri doğru kullan
- Uzunluğu orijinale yakın tut
- Sadece iyileştirilmiş içeriği döndür"""
