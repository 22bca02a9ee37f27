"""
Internationalization module for the Melon web app.
Provides the translation layer for all user-facing messages.
"""

import logging
import os
from enum import Enum
from typing import Dict, Optional


class Language(Enum):
    """Supported languages."""
    EN = "en"
    JA = "ja"


class TranslationManager:
    """Manages translations and message formatting."""

    def __init__(self, default_language: Language = Language.EN):
        self.default_language = default_language
        self.translations = self._load_translations()

    def _load_translations(self) -> Dict[Language, Dict[str, str]]:
        """Load all translations."""
        return {
            Language.EN: self._get_english_translations(),
            Language.JA: self._get_japanese_translations(),
        }

    def _get_english_translations(self) -> Dict[str, str]:
        """English translations."""
        return {
            # Auth
            "login_required": "You must be logged in",
            "invalid_credentials": "Incorrect email address or password",
            "email_already_registered": "This email address is already registered",
            "signup_failed": "Failed to create the account",
            "invalid_email": "Please enter a valid email address",
            "password_too_short": "Password must be at least {min} characters",
            "password_mismatch": "Passwords do not match",

            # Reactions
            "reaction_check_failed": "Failed to check the existing reaction",
            "reaction_add_failed": "Failed to add the reaction",
            "reaction_change_failed": "Failed to change the reaction",
            "reaction_delete_failed": "Failed to remove the reaction",
            "reaction_failed": "Failed to process the reaction",
            "invalid_emoji": "This reaction is not available",

            # Posts
            "post_content_required": "Please enter some content",
            "post_content_too_long": "Posts must be {max} characters or fewer",
            "post_tag_required": "Please choose a tag",
            "post_too_many_images": "You can upload up to {max} images",
            "post_create_failed": "Failed to create the post",
            "post_not_found": "Post not found",
            "post_delete_failed": "Failed to delete the post",
            "post_delete_forbidden": "Post not found or you are not allowed to delete it",
            "reply_create_failed": "Failed to post the reply",
            "image_invalid_type": "Only JPEG, PNG, GIF and WebP images can be uploaded",
            "image_invalid_type_avatar": "Only JPEG, PNG and WebP images can be used as an avatar",
            "image_too_large": "Images must be {max_mb}MB or smaller",
            "image_unreadable": "The image could not be read",
            "image_type_mismatch": "The file contents do not match its image type",
            "image_upload_failed": "Failed to upload the image: {reason}",
            "image_delete_failed": "Failed to delete the image: {reason}",

            # Follows
            "cannot_follow_self": "You cannot follow yourself",
            "follow_failed": "Failed to follow the user",
            "unfollow_failed": "Failed to unfollow the user",
            "follow_target_not_found": "User not found",

            # Notifications
            "notification_update_failed": "Failed to update notifications",

            # Profiles
            "username_too_short": "Username must be at least {min} characters",
            "username_too_long": "Username must be {max} characters or fewer",
            "username_invalid_chars": "Only letters, numbers and underscores are allowed",
            "username_taken": "This username is already in use",
            "display_name_too_long": "Display name must be {max} characters or fewer",
            "bio_too_long": "Bio must be {max} characters or fewer",
            "interests_required": "Please choose at least {min} interest",
            "interests_too_many": "You can choose up to {max} interests",
            "profile_update_failed": "Failed to update the profile",
            "profile_not_found": "Profile not found",
            "avatar_update_failed": "Failed to update the avatar",
            "avatar_remove_failed": "Failed to remove the avatar",
            "onboarding_required": "Please complete your profile first",
            "unexpected_error": "An unexpected error occurred",

            # Database errors
            "db_unique_violation": "This value is already in use",
            "db_fk_violation": "Related data does not exist",
            "db_not_null_violation": "A required field is missing",
            "db_insufficient_privilege": "You are not allowed to perform this operation",
            "db_error": "A database error occurred",
            "network_error": "A network error occurred. Please check your connection",
            "unknown_error": "An unknown error occurred",
            "generic_error": "An error occurred",

            # Relative time
            "time_unknown": "unknown",
            "time_just_now": "just now",
            "time_minutes_ago": "{n}m ago",
            "time_hours_ago": "{n}h ago",
            "time_days_ago": "{n}d ago",
            "time_weeks_ago": "{n}w ago",
            "time_months_ago": "{n}mo ago",
            "time_years_ago": "{n}y ago",

            # Tags
            "tag_general": "General",
            "tag_question": "Question",
            "tag_chat": "Chat",
            "tag_illustration": "Illustration",
            "tag_progress": "Progress",
        }

    def _get_japanese_translations(self) -> Dict[str, str]:
        """Japanese translations."""
        return {
            # Auth
            "login_required": "ログインが必要です",
            "invalid_credentials": "メールアドレスまたはパスワードが正しくありません",
            "email_already_registered": "このメールアドレスは既に登録されています",
            "signup_failed": "アカウントの作成に失敗しました",
            "invalid_email": "正しいメールアドレスを入力してください",
            "password_too_short": "パスワードは{min}文字以上で入力してください",
            "password_mismatch": "パスワードが一致しません",

            # Reactions
            "reaction_check_failed": "リアクションの確認に失敗しました",
            "reaction_add_failed": "リアクションの追加に失敗しました",
            "reaction_change_failed": "リアクションの変更に失敗しました",
            "reaction_delete_failed": "リアクションの削除に失敗しました",
            "reaction_failed": "リアクションの処理に失敗しました",
            "invalid_emoji": "このリアクションは使用できません",

            # Posts
            "post_content_required": "投稿内容を入力してください",
            "post_content_too_long": "投稿は{max}文字以下で入力してください",
            "post_tag_required": "タグを選択してください",
            "post_too_many_images": "画像は最大{max}枚までアップロード可能です",
            "post_create_failed": "投稿に失敗しました",
            "post_not_found": "投稿が見つかりません",
            "post_delete_failed": "投稿の削除に失敗しました",
            "post_delete_forbidden": "投稿が見つからないか、削除する権限がありません",
            "reply_create_failed": "リプライの投稿に失敗しました",
            "image_invalid_type": "JPEG、PNG、GIF、WebP形式の画像のみアップロード可能です",
            "image_invalid_type_avatar": "JPEG、PNG、WebP形式の画像のみ使用できます",
            "image_too_large": "画像サイズは{max_mb}MB以下である必要があります",
            "image_unreadable": "画像を読み込めませんでした",
            "image_type_mismatch": "ファイルの内容が画像形式と一致しません",
            "image_upload_failed": "画像のアップロードに失敗しました: {reason}",
            "image_delete_failed": "画像の削除に失敗しました: {reason}",

            # Follows
            "cannot_follow_self": "自分自身をフォローすることはできません",
            "follow_failed": "フォローに失敗しました",
            "unfollow_failed": "フォロー解除に失敗しました",
            "follow_target_not_found": "ユーザーが見つかりません",

            # Notifications
            "notification_update_failed": "通知の更新に失敗しました",

            # Profiles
            "username_too_short": "ユーザー名は{min}文字以上で入力してください",
            "username_too_long": "ユーザー名は{max}文字以下で入力してください",
            "username_invalid_chars": "英数字とアンダースコアのみ使用可能です",
            "username_taken": "このユーザー名は既に使用されています",
            "display_name_too_long": "表示名は{max}文字以下で入力してください",
            "bio_too_long": "自己紹介は{max}文字以下で入力してください",
            "interests_required": "興味のある分野を{min}つ以上選択してください",
            "interests_too_many": "興味のある分野は{max}つまで選択可能です",
            "profile_update_failed": "プロフィールの更新に失敗しました",
            "profile_not_found": "プロフィールが見つかりません",
            "avatar_update_failed": "アバターの更新に失敗しました",
            "avatar_remove_failed": "アバターの削除に失敗しました",
            "onboarding_required": "先にプロフィールを設定してください",
            "unexpected_error": "予期しないエラーが発生しました",

            # Database errors
            "db_unique_violation": "この値は既に使用されています",
            "db_fk_violation": "関連するデータが存在しません",
            "db_not_null_violation": "必須項目が入力されていません",
            "db_insufficient_privilege": "この操作を行う権限がありません",
            "db_error": "データベースエラーが発生しました",
            "network_error": "ネットワークエラーが発生しました。接続を確認してください",
            "unknown_error": "不明なエラーが発生しました",
            "generic_error": "エラーが発生しました",

            # Relative time
            "time_unknown": "不明",
            "time_just_now": "たった今",
            "time_minutes_ago": "{n}分前",
            "time_hours_ago": "{n}時間前",
            "time_days_ago": "{n}日前",
            "time_weeks_ago": "{n}週間前",
            "time_months_ago": "{n}ヶ月前",
            "time_years_ago": "{n}年前",

            # Tags
            "tag_general": "一般",
            "tag_question": "質問",
            "tag_chat": "雑談",
            "tag_illustration": "イラスト",
            "tag_progress": "進捗",
        }

    def get_message(self, key: str, language: Optional[Language] = None, **kwargs) -> str:
        """Get translated message with variable substitution."""
        lang = language or self.default_language
        translations = self.translations.get(lang, self.translations[self.default_language])

        message = translations.get(key, key)

        if kwargs:
            try:
                message = message.format(**kwargs)
            except KeyError as e:
                logging.warning(f"Missing variable {e} for message key '{key}' in language {lang.value}")

        return message

    def has_message(self, key: str, language: Optional[Language] = None) -> bool:
        lang = language or self.default_language
        return key in self.translations.get(lang, {})


def _language_from_env() -> Language:
    value = os.getenv("MELON_LANGUAGE", "en").strip().lower()
    for lang in Language:
        if lang.value == value:
            return lang
    return Language.EN


# Global instance
_translation_manager = TranslationManager(_language_from_env())


def get_message(key: str, language: Optional[Language] = None, **kwargs) -> str:
    """Convenience function to get translated message."""
    return _translation_manager.get_message(key, language, **kwargs)


def has_message(key: str, language: Optional[Language] = None) -> bool:
    return _translation_manager.has_message(key, language)

