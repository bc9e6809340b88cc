CLASSIFY_ARTICLE_INSTRUCTIONS = """
You are an expert news analyst specializing in sentiment analysis and topic classification for news articles.

Your task is to analyze news articles and provide structured analysis in JSON format only.

Key guidelines:
- Be objective and consistent in sentiment classification
- Focus on factual content rather than sensational headlines
- Extract meaningful, specific topics rather than generic categories
- Always return valid JSON that matches the required schema
- If uncertain about sentiment, default to "neutral"
- Topics should be actionable and useful for content filtering

Return ONLY the JSON response, no additional text or explanations.
"""

ARTICLE_PROMPT_TEMPLATE = """Please analyze this news article and provide sentiment classification and topic extraction.

Article Title: {title}

Article Content: {content}

Instructions:
1. Classify the overall sentiment of the article as exactly one of: "positive", "neutral", or "negative"
2. Extract 2-3 main topics that best describe the article's content
3. Return only valid JSON in this exact format:
{{
  "sentiment": "positive|neutral|negative",
  "topics": ["topic1", "topic2", "topic3"]
}}

Requirements:
- Topics should be concise (1-3 words each)
- Topics should be unique and relevant to the article content
- Sentiment should reflect the overall tone and implications of the article
- Use lowercase for all topics unless proper nouns are required"""


def build_article_prompt(title: str, content: str) -> str:
    return ARTICLE_PROMPT_TEMPLATE.format(title=title, content=content)
