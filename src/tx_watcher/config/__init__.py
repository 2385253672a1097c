"""Configuration models for the watcher and its gateway connection."""

from __future__ import annotations

from tx_watcher.config.settings import AppConfig, GatewayConfig, LogLevel, WatcherConfig

__all__ = ["AppConfig", "GatewayConfig", "LogLevel", "WatcherConfig"]
