"""对运行中的服务做一次冒烟检查：登录演示教师并列出课程。

先运行 ``scripts/seed_demo_data.py``，再用 ``uvicorn curricula.main:app`` 启动服务。
"""
import sys

import requests

BASE_URL = sys.argv[1] if len(sys.argv) > 1 else "http://127.0.0.1:8000"

# 登录
login_response = requests.post(
    f"{BASE_URL}/api/auth/login",
    data={"email": "teacher@demo.local", "password": "password123"},
    timeout=10,
)

print(f"登录状态: {login_response.status_code}")

if login_response.status_code == 200:
    token = login_response.json()["accessToken"]
    headers = {"Authorization": f"Bearer {token}"}

    # 获取课程列表
    curriculums_response = requests.get(f"{BASE_URL}/api/curriculum", headers=headers, timeout=10)
    print(f"\n课程列表API状态: {curriculums_response.status_code}")
    for item in curriculums_response.json():
        print(f"  {item['title']} (code={item['uniqueCode']}, lectures={item['lectureCount']})")

    dashboard_response = requests.get(f"{BASE_URL}/api/dashboard/teacher", headers=headers, timeout=10)
    print(f"\n教师首页API状态: {dashboard_response.status_code}")
else:
    print(f"登录失败: {login_response.text}")
    sys.exit(1)
