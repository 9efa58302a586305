"""Prompt templates for conversation summaries."""

SYSTEM_PROMPT = "あなたは日本語でSlackメッセージを要約する専門家です。"

SUMMARY_PROMPT = """以下のSlackメッセージを分析し、指定の形式で要約してください。

チャンネル: #{channel}
メッセージ:
{transcript}

【出力形式】この形式を厳密に守ること:

## タイトル: （25字以内・句点なし・内容を表す具体的な名詞句）

- 要点1
- 要点2
- 要点3

## 関連リンク
- [[トピック]] … 関連する理由（3〜5個）

tags:
  - タグ1
  - タグ2

【タグの候補】
エンジニアリング: VBA, GAS, Python, 自動化ツール, Power_Automate
技術学習: G検定, AWS, BigQuery, Looker_Studio
業務・仕事: 午前勤務, 午後勤務, 業務効率化, 社内ツール開発
健康・生活: ウォーキング, 読書, 睡眠改善, 体重管理
成長・復調: スキルアップ, デスクワーク, 転職
心理・メンタル: 自信回復, 振り返り, 気づき
状態: 要対応, 高優先度, 進行中, 完了

【ルール】
- 要約は「〜だ」調で書く
- ハッシュタグ（#）は出力しない。タグは tags: の箇条書きだけに書く
- 関連リンクは [[ワード]] 形式で、メッセージ内容に関係するトピックを挙げる
- タグにスペースを含めない（必要ならアンダースコアを使う）
"""


def render_summary_prompt(channel: str, transcript: str) -> str:
    """Fill the summary template for one channel transcript."""
    return SUMMARY_PROMPT.format(channel=channel, transcript=transcript)
