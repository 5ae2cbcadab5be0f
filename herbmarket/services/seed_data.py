"""Reference data written on first initialization."""
from herbmarket.models import (
    AuditStatus,
    GroupBuyStatus,
    StockStatus,
    UserRole,
)
from datetime import datetime, timedelta

ADMIN_USER_ID = 'demo-admin-1'
ADMIN_EMAIL = 'admin@platform.com'
ADMIN_BUSINESS_NAME = '中药材B2B平台管理中心'

# (name_cn, name_en, price, stock, description, seller business name)
CATALOG_HERBS = [
    ('当归', 'Angelica Sinensis', 45.00, 100,
     '优质当归，产地甘肃，品质上乘。补血活血，调经止痛', '甘肃中药材有限公司'),
    ('人参', 'Ginseng', 280.00, 50,
     '长白山野生人参，滋补佳品。大补元气，复脉固脱', '长白山参业集团'),
    ('枸杞', 'Goji Berry', 32.00, 200,
     '宁夏枸杞，颗粒饱满，营养丰富。滋补肝肾，益精明目', '宁夏枸杞专业合作社'),
    ('黄芪', 'Astragalus', 38.00, 150,
     '内蒙古黄芪，补气固表，利尿托毒，排脓生肌', '内蒙古草原药材'),
    ('川芎', 'Ligusticum', 42.00, 120,
     '四川川芎，活血行气，祛风止痛', '四川道地药材'),
    ('白芍', 'White Peony Root', 35.00, 180,
     '安徽白芍，养血柔肝，缓中止痛', '安徽亳州药材'),
    ('熟地黄', 'Prepared Rehmannia', 48.00, 90,
     '河南熟地黄，滋阴补血，益精填髓', '河南怀药集团'),
    ('茯苓', 'Poria', 28.00, 220,
     '云南茯苓，利水渗湿，健脾宁心', '云南天然药材'),
    ('白术', 'Atractylodes', 52.00, 110,
     '浙江白术，健脾益气，燥湿利水', '浙江磐安药材'),
    ('甘草', 'Licorice Root', 25.00, 300,
     '新疆甘草，补脾益气，清热解毒', '新疆甘草专业社'),
    ('党参', 'Codonopsis', 38.00, 140,
     '山西党参，补中益气，健脾益肺', '山西上党参业'),
    ('麦冬', 'Ophiopogon', 45.00, 160,
     '浙江麦冬，养阴生津，润肺清心', '浙江杭白菊合作社'),
    ('五味子', 'Schisandra', 68.00, 80,
     '东北五味子，收敛固涩，益气生津', '东北林下资源'),
    ('山药', 'Chinese Yam', 32.00, 200,
     '河南怀山药，补脾养胃，生津益肺', '河南怀药基地'),
    ('丹参', 'Salvia', 55.00, 95,
     '山东丹参，活血祛瘀，通经止痛', '山东丹参种植园'),
    ('桔梗', 'Platycodon', 42.00, 130,
     '安徽桔梗，宣肺，利咽，祛痰', '安徽桔梗专业社'),
    ('陈皮', 'Tangerine Peel', 38.00, 170,
     '广东新会陈皮，理气健脾，燥湿化痰', '广东新会陈皮厂'),
    ('半夏', 'Pinellia', 48.00, 85,
     '贵州半夏，燥湿化痰，降逆止呕', '贵州山地药材'),
    ('柴胡', 'Bupleurum', 65.00, 75,
     '山西柴胡，疏肝解郁，升阳举陷', '山西柴胡种植基地'),
    ('黄连', 'Coptis', 120.00, 45,
     '四川黄连，清热燥湿，泻火解毒', '四川黄连专业合作社'),
]


def _iso(dt):
    return dt.isoformat() + 'Z'


def default_products(now=None):
    now = now or datetime.utcnow()
    products = []
    for index, herb in enumerate(CATALOG_HERBS, start=1):
        name_cn, name_en, price, stock, description, business_name = herb
        seller_id = f'demo-seller-{index}'
        products.append({
            'id': index,
            'name_cn': name_cn,
            'name_en': name_en,
            'price': price,
            'stock': stock,
            'description': description,
            'image_url': None,
            'seller_id': seller_id,
            'created_at': _iso(now),
            'updated_at': _iso(now),
            'seller': {
                'business_name': business_name,
                'id': seller_id,
            },
            'stock_status': StockStatus.IN_STOCK.value,
            'audit_status': AuditStatus.APPROVED.value,
        })
    return products


def default_admin(now=None):
    now = now or datetime.utcnow()
    return {
        'id': ADMIN_USER_ID,
        'email': ADMIN_EMAIL,
        'business_name': ADMIN_BUSINESS_NAME,
        'role': UserRole.ADMIN.value,
        'created_at': _iso(now),
    }


def default_users(now=None):
    now = now or datetime.utcnow()
    return [
        {
            'id': 'demo-buyer-1',
            'email': 'buyer@demo.com',
            'business_name': '北京中医药贸易公司',
            'role': UserRole.BUYER.value,
            'created_at': _iso(now),
        },
        {
            'id': 'demo-seller-1',
            'email': 'seller@demo.com',
            'business_name': '甘肃中药材有限公司',
            'role': UserRole.SELLER.value,
            'created_at': _iso(now),
        },
        default_admin(now),
    ]


def default_group_buy_activities(now=None):
    now = now or datetime.utcnow()
    return [
        {
            'id': '1',
            'product_name': '当归',
            'target_quantity': 1000,
            'current_quantity': 750,
            'unit_price': 45.00,
            'group_price': 38.00,
            'end_date': _iso(now + timedelta(days=7)),
            'participants': 15,
            'status': GroupBuyStatus.ACTIVE.value,
            'created_at': _iso(now),
        }
    ]
