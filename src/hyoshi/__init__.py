"""固定間隔でアクションを実行する常駐プロセス。"""
