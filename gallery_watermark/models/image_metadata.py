"""图片元数据与处理结果模型."""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class ImageMetadata(BaseModel):
    """源图片元数据.

    由调用方持久化。size 为原始上传数据的字节数，而非水印输出的字节数。

    Attributes:
        width: 宽度（像素）
        height: 高度（像素）
        format: 源图片格式，小写（jpeg / png / webp）
        size: 原始数据字节数
    """

    model_config = ConfigDict(frozen=True)

    width: int = Field(gt=0, description="宽度（像素）")
    height: int = Field(gt=0, description="高度（像素）")
    format: str = Field(description="源图片格式")
    size: int = Field(ge=0, description="原始数据字节数")

    @property
    def dimensions(self) -> tuple[int, int]:
        """(宽, 高) 元组."""
        return (self.width, self.height)


class PublishedImage(BaseModel):
    """水印图片发布结果.

    Attributes:
        watermarked_url: 图床上的水印图片地址
        original_url: 原图地址（从远程地址导入时）
        metadata: 源图片元数据
    """

    watermarked_url: str = Field(description="水印图片地址")
    original_url: Optional[str] = Field(default=None, description="原图地址")
    metadata: ImageMetadata

    def to_record(self) -> dict:
        """转换为扁平字典，供文档存储写入."""
        record = {
            "originalImage": self.original_url,
            "watermarkedImage": self.watermarked_url,
        }
        record.update(self.metadata.model_dump())
        return record
