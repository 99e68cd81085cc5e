from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession
from sqlalchemy.orm import sessionmaker
from app.core.config import DATABASE_ECHO, DATABASE_URL

# 設備儲存庫共用的 async engine，DATABASE_ECHO=true 時印出 SQL 以便除錯
engine = create_async_engine(DATABASE_URL, echo=DATABASE_ECHO, future=True)

# 每個儲存庫操作各自從這裡開啟 session
# expire_on_commit=False 讓 commit 後仍能讀取資料列欄位
async_session_maker = sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
