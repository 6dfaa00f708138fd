"""User-facing ``result`` messages, localized for the kintone plugin clients."""

INVALID_PARAMETERS = "パラメータが不正です"
COUNTER_FETCHED = "取得完了"
RECORDED = "データベースへ追加しました"
UNEXPECTED_ERROR = "予期せぬエラーが発生しました。"
