"""houndbatch - BloodHound/Neo4j 방어용 쿼리 배치 실행기"""

__version__ = "0.1.0"
