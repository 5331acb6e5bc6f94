"""清理测试数据：清空数据库所有表并删除已上传文件。"""
import sys
from pathlib import Path

# 添加项目根目录到 path
sys.path.insert(0, str(Path(__file__).parent.parent))

from curricula.config import get_settings
from curricula.db import Base, session_scope
from curricula.utils.storage import remove_directory


def clean():
    print("=" * 50)
    print("清理测试数据")
    print("=" * 50)

    # 1. 清空数据库（子表在前）
    print("\n[1/2] 清空数据库...")
    with session_scope() as db:
        for table in reversed(Base.metadata.sorted_tables):
            count = db.execute(table.delete()).rowcount
            print(f"  删除 {table.name}: {count} 条")
    print("  ✓ 数据库已清空")

    # 2. 删除上传目录
    print("\n[2/2] 删除上传文件...")
    upload_dir = Path(get_settings().upload_dir)
    for category in ("lectures", "attachments", "submissions"):
        folder = upload_dir / category
        if folder.exists():
            remove_directory(folder)
            print(f"  删除 {category}/")
    print("  ✓ 上传文件已删除")

    print("\n" + "=" * 50)
    print("清理完成！")
    print("=" * 50)


if __name__ == "__main__":
    clean()
