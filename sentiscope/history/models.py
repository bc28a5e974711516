# sentiscope/history/models.py

from datetime import datetime, timezone

from sentiscope.extensions import db


def _utcnow():
    return datetime.now(timezone.utc)


def make_preview(text, length=50):
    return text[:length] + '...' if len(text) > length else text


class AnalysisRecord(db.Model):
    """One saved analysis of a signed-in user."""

    __tablename__ = 'analyses'

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.String(255), nullable=False, index=True)

    text = db.Column(db.Text, nullable=False)
    text_preview = db.Column(db.String(60), nullable=False)
    label = db.Column(db.String(10), nullable=False)
    score = db.Column(db.Float, nullable=False)
    primary_emotion = db.Column(db.String(50))
    emotions = db.Column(db.JSON)
    # ISO-8601 string exactly as produced by the normalizer.
    timestamp = db.Column(db.String(40), nullable=False)

    created_at = db.Column(db.DateTime(timezone=True), default=_utcnow, nullable=False)
    updated_at = db.Column(db.DateTime(timezone=True), default=_utcnow, onupdate=_utcnow)

    @classmethod
    def from_result(cls, user_id, result):
        return cls(
            user_id=user_id,
            text=result['text'],
            text_preview=make_preview(result['text']),
            label=result['label'],
            score=result['score'],
            primary_emotion=result.get('primaryEmotion'),
            emotions=result.get('emotions'),
            timestamp=result['timestamp'],
        )

    def to_dict(self):
        item = {
            'id': str(self.id),
            'label': self.label,
            'score': self.score,
            'text': self.text,
            'textPreview': self.text_preview,
            'timestamp': self.timestamp,
        }
        if self.emotions is not None:
            item['emotions'] = self.emotions
        if self.primary_emotion is not None:
            item['primaryEmotion'] = self.primary_emotion
        return item

    def __repr__(self):
        return f"<AnalysisRecord {self.id} user={self.user_id} label={self.label}>"


class UserProfile(db.Model):
    """Per-user counters, refreshed after every history change."""

    __tablename__ = 'profiles'

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.String(255), nullable=False, unique=True)
    total_analyses = db.Column(db.Integer, nullable=False, default=0)
    created_at = db.Column(db.DateTime(timezone=True), default=_utcnow, nullable=False)
    updated_at = db.Column(db.DateTime(timezone=True), default=_utcnow, onupdate=_utcnow)

    def to_dict(self):
        return {
            'userId': self.user_id,
            'totalAnalyses': self.total_analyses,
            'createdAt': self.created_at.isoformat() if self.created_at else None,
            'updatedAt': self.updated_at.isoformat() if self.updated_at else None,
        }
