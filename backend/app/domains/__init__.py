"""
Domain Layer

包含應用程序的核心領域模型和業務邏輯，按功能領域分為多個子模塊：

- device: 電腦、醫療設備與常客電腦的入場與出場登記
- common: 各領域共用的基礎模型與工具
"""
