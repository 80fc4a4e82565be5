"""Demo accounts and budget funds for local development.
(Read by scripts/seed_demo.py; single source of truth for seeded reference data.)
"""

DEMO_PASSWORD_ENV = 'SEED_DEMO_PASSWORD'
DEFAULT_DEMO_PASSWORD = 'ChangeMe123!'

# One account per role; email -> (name, role, department)
USERS = {
    'student@example.com': ('生徒 太郎', 'student', '吹奏楽部'),
    'teacher@example.com': ('担当 先生', 'teacher', '吹奏楽部'),
    'kyoto@example.com': ('教頭 先生', 'kyoto', None),
    'vice@example.com': ('副校長 先生', 'vice_principal', None),
    'principal@example.com': ('校長 先生', 'principal', None),
    'office@example.com': ('事務長', 'office_chief', None),
    'chairman@example.com': ('理事長', 'chairman', None),
    'accounting@example.com': ('出納 担当', 'accounting', None),
}

# name -> description; year is taken from the --year option
FUNDS = {
    '部活動費': 'クラブ活動の消耗品・遠征費',
    '教材費': '授業で使用する教材・備品',
    '行事費': '学校行事の運営費',
}
