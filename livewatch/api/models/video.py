from pydantic import BaseModel
from typing import Optional, Dict, Any

DEFAULT_VIDEO_TITLE = 'YouTube Video'
DEFAULT_VIDEO_AUTHOR = 'Unknown'


class VideoStatus(BaseModel):
    valid: bool
    title: Optional[str] = None
    author: Optional[str] = None
    is_live: Optional[bool] = None
    error: Optional[str] = None

    def to_response(self) -> Dict[str, Any]:
        """Formato JSON delle API: espone sia 'isValid' che 'valid' per i client di entrambe le versioni."""
        payload = {'isValid': self.valid, 'valid': self.valid}
        if self.title is not None:
            payload['title'] = self.title
        if self.author is not None:
            payload['author'] = self.author
        if self.is_live is not None:
            payload['isLive'] = self.is_live
        if self.error is not None:
            payload['error'] = self.error
        return payload

    @classmethod
    def from_response(cls, data: Dict[str, Any]) -> "VideoStatus":
        valid = data.get('isValid', data.get('valid', False))
        return cls(
            valid=bool(valid),
            title=data.get('title'),
            author=data.get('author'),
            is_live=data.get('isLive'),
            error=data.get('error'),
        )


class DownloadResolution(BaseModel):
    success: bool
    video_id: str
    download_url: Optional[str] = None
    message: Optional[str] = None
    error: Optional[str] = None

    def to_response(self) -> Dict[str, Any]:
        payload = {'success': self.success, 'videoId': self.video_id}
        if self.download_url is not None:
            payload['downloadUrl'] = self.download_url
        if self.message is not None:
            payload['message'] = self.message
        if self.error is not None:
            payload['error'] = self.error
        return payload

    @classmethod
    def from_response(cls, data: Dict[str, Any], video_id: str) -> "DownloadResolution":
        return cls(
            success=bool(data.get('success', False)),
            video_id=data.get('videoId') or video_id,
            download_url=data.get('downloadUrl'),
            message=data.get('message'),
            error=data.get('error'),
        )
