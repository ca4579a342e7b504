"""gallery-watermark 命令行入口."""

from __future__ import annotations

import asyncio
import json
import sys
from pathlib import Path
from typing import Optional

import click

from gallery_watermark.core.config_manager import get_config
from gallery_watermark.core.watermark_compositor import WatermarkCompositor
from gallery_watermark.models.watermark_config import BLEND_MODE_NAMES, BlendMode
from gallery_watermark.services.watermark_service import WatermarkService
from gallery_watermark.utils.constants import (
    APP_NAME,
    APP_VERSION,
    OUTPUT_SUFFIX,
    OVERLAY_SUFFIX,
)
from gallery_watermark.utils.error_handler import ErrorCollector, get_error_details
from gallery_watermark.utils.exceptions import AppException, ImageTooLargeError
from gallery_watermark.utils.logger import configure_logging, setup_logger

logger = setup_logger(__name__)

_BLEND_HELP = "混合模式: " + "，".join(
    f"{mode.value}={name}" for mode, name in BLEND_MODE_NAMES.items()
)


def _output_path(source: Path, out_dir: Optional[Path], suffix: str = OUTPUT_SUFFIX) -> Path:
    """计算输出文件路径."""
    directory = out_dir or source.parent
    return directory / f"{source.stem}{suffix}"


def _read_source(path: Path, max_size: int) -> bytes:
    """读取输入文件，超过大小上限时不读取内容.

    Raises:
        ImageTooLargeError: 文件超过大小上限
        OSError: 文件无法读取
    """
    size = path.stat().st_size
    if size > max_size:
        raise ImageTooLargeError(size, max_size)
    return path.read_bytes()


async def _publish_all(service: WatermarkService, inputs: list[Path], max_size: int,
                       collector: ErrorCollector) -> list[dict]:
    """逐个上传并收集结果."""
    records = []
    try:
        for path in inputs:
            try:
                data = _read_source(path, max_size)
                published = await service.publish(data, name=path.stem)
            except (AppException, OSError) as e:
                collector.add(e, context=str(path))
                continue
            records.append({"input": str(path), **published.to_record()})
    finally:
        await service.close()
    return records


@click.command()
@click.version_option(version=APP_VERSION, prog_name=APP_NAME)
@click.argument("inputs", nargs=-1, required=True,
                type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("-o", "--out-dir", type=click.Path(file_okay=False, path_type=Path),
              help="输出目录（默认与输入文件相同）")
@click.option("--divisor", type=int, help="平铺除数")
@click.option("--font-ratio", type=float, help="字号比例")
@click.option("--angle", type=float, help="旋转角度")
@click.option("--blend", type=click.Choice([m.value for m in BlendMode]),
              help=_BLEND_HELP)
@click.option("--quality", type=int, help="输出 JPEG 质量 (90-95)")
@click.option("--label", help="水印文字")
@click.option("--save-overlay", is_flag=True, help="同时导出叠加层 SVG")
@click.option("--upload", is_flag=True, help="上传到图床而不是写入本地文件")
@click.option("--log-level", help="日志级别")
def cli(inputs, out_dir, divisor, font_ratio, angle, blend, quality, label, save_overlay,
        upload, log_level):
    """为图片添加平铺水印，每个输入输出一行 JSON 元数据."""
    config_manager = get_config()
    collector = ErrorCollector()
    try:
        settings = config_manager.settings
        config = config_manager.watermark_config.with_overrides(
            tile_divisor=divisor,
            font_size_ratio=font_ratio,
            rotation_angle=angle,
            blend_mode=blend,
            output_quality=quality,
            label_text=label,
        )
        font = config_manager.font
    except AppException as e:
        raise click.UsageError(str(e)) from e

    configure_logging(settings.log_dir, log_level or settings.log_level)
    compositor = WatermarkCompositor(config, font)
    max_size = settings.max_upload_size

    if upload:
        service = WatermarkService(compositor=compositor)
        records = asyncio.run(_publish_all(service, list(inputs), max_size, collector))
        for record in records:
            click.echo(json.dumps(record, ensure_ascii=False))
    else:
        if out_dir:
            out_dir.mkdir(parents=True, exist_ok=True)
        for path in inputs:
            try:
                result = compositor.apply_watermark(_read_source(path, max_size))
                target = _output_path(path, out_dir)
                target.write_bytes(result.watermarked_bytes)
                if save_overlay:
                    overlay = compositor.build_overlay(result.layout)
                    _output_path(path, out_dir, OVERLAY_SUFFIX).write_bytes(overlay.to_bytes())
            except (AppException, OSError) as e:
                collector.add(e, context=str(path))
                continue
            record = {"input": str(path), "output": str(target)}
            record.update(result.metadata.model_dump())
            record["tiles"] = result.layout.tile_count
            click.echo(json.dumps(record, ensure_ascii=False))

    if collector.has_errors:
        for exc, context in collector.errors:
            click.echo(json.dumps({"input": context, "error": get_error_details(exc)},
                                  ensure_ascii=False), err=True)
        logger.error(collector.summary)
        sys.exit(1)


def main() -> None:
    """控制台脚本入口."""
    cli()


if __name__ == "__main__":
    main()
