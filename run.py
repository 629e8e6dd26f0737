"""
uvicorn 启动入口

监听地址取自 config.yaml 的 server 节点；worker 数与 keep-alive 超时可用环境变量覆盖。
每个 worker 通过 app:create_app 工厂在启动时自行加载配置和日志。
"""
import os

import uvicorn

from opsgenie_forwarder.core.config import load_config, server_address


def main():
    raw, _ = load_config()
    host, port = server_address(raw)
    uvicorn.run(
        "app:create_app",
        factory=True,
        host=host,
        port=port,
        workers=int(os.getenv("WORKERS", 1)),
        timeout_keep_alive=int(os.getenv("TIMEOUT", 30)),
        log_level="info",
        access_log=True,
    )


if __name__ == "__main__":
    main()
