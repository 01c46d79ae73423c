"""
HTML rendering for the IPGOT report page
"""

import datetime
from html import escape
from typing import Any, Optional

from ipgot.core.models import AnalysisResult, BrowserContext, LookupResult

NO_DATA_MESSAGE = "未找到该IP地址的相关信息"
DEFAULT_RISK_SCORE = 30

BULMA_CSS = "https://cdnjs.cloudflare.com/ajax/libs/bulma/0.9.3/css/bulma.min.css"
FONT_AWESOME_CSS = "https://cdnjs.cloudflare.com/ajax/libs/font-awesome/6.4.0/css/all.min.css"
BAIDU_MAP_API = "https://api.map.baidu.com/api?v=3.0&ak={ak}&callback=initBaiduMap"

# Field labels and icons for the basic info cards, in display order
INFO_FIELDS = (
    ("ip", "IP地址", "fa-address-card"),
    ("city", "城市", "fa-city"),
    ("region", "地区", "fa-map-marked-alt"),
    ("country", "国家", "fa-flag"),
    ("org", "组织", "fa-building"),
    ("isp", "ISP提供商", "fa-network-wired"),
    ("asn", "ASN", "fa-project-diagram"),
    ("timezone", "时区", "fa-clock"),
    ("hostname", "主机名", "fa-server"),
)

BROWSER_ICONS = (
    ("Chrome", "fab fa-chrome"),
    ("Firefox", "fab fa-firefox"),
    ("Safari", "fab fa-safari"),
    ("Edge", "fab fa-edge"),
    ("Opera", "fab fa-opera"),
)

OS_ICONS = (
    ("Windows", "fab fa-windows"),
    ("macOS", "fab fa-apple"),
    ("Linux", "fab fa-linux"),
    ("Android", "fab fa-android"),
    ("iOS", "fas fa-mobile-alt"),
)

PAGE_CSS = """
      :root {
        --primary-color: #4361ee;
        --secondary-color: #3f37c9;
        --animation-duration: 0.5s;
        --high-risk: #ff3860;
        --medium-risk: #ffdd57;
        --low-risk: #48c774;
      }
      body {
        background: linear-gradient(135deg, #f5f7fa 0%, #e4edf5 100%);
        min-height: 100vh;
        font-family: 'Segoe UI', 'Microsoft YaHei', sans-serif;
        overflow-x: hidden;
      }
      .hero {
        background: linear-gradient(120deg, var(--primary-color), var(--secondary-color));
        border-radius: 0 0 20px 20px;
        box-shadow: 0 4px 20px rgba(0, 0, 0, 0.1);
        animation: slideDown var(--animation-duration) ease-out;
      }
      .card {
        border-radius: 15px;
        box-shadow: 0 10px 30px rgba(0, 0, 0, 0.08);
        transition: all 0.4s ease;
        overflow: hidden;
        animation: fadeInUp var(--animation-duration) forwards;
      }
      .card:hover { transform: translateY(-8px); box-shadow: 0 15px 35px rgba(0, 0, 0, 0.15); }
      .card-header { background: linear-gradient(to right, var(--primary-color), var(--secondary-color)); }
      .notification { border-radius: 10px; animation: fadeIn var(--animation-duration) ease-in; }
      .ip-badge {
        background: linear-gradient(45deg, #4cc9f0, #4361ee);
        color: white;
        font-weight: bold;
        padding: 0.5rem 1.2rem;
        border-radius: 50px;
        display: inline-block;
        animation: pulse 2s infinite;
      }
      .btn-gradient { background: linear-gradient(to right, var(--primary-color), var(--secondary-color)); color: white; border: none; }
      .btn-gradient:hover { color: white; transform: translateY(-3px); }
      .footer { background: rgba(0, 0, 0, 0.03); padding: 2rem 1.5rem; margin-top: 3rem; }
      .is-hidden { display: none; }
      .info-grid { display: grid; grid-template-columns: repeat(auto-fit, minmax(250px, 1fr)); gap: 1.5rem; margin-top: 2rem; }
      .info-item { background: white; border-radius: 12px; padding: 1.5rem; box-shadow: 0 5px 15px rgba(0, 0, 0, 0.05); transition: all 0.3s ease; }
      .info-item:hover { transform: translateY(-5px); }
      .info-title { color: var(--primary-color); font-weight: 600; margin-bottom: 0.5rem; display: flex; align-items: center; gap: 0.5rem; }
      .map-container { height: 300px; border-radius: 12px; overflow: hidden; margin-top: 1.5rem; }
      .browser-info { background: linear-gradient(45deg, #f8f9fa, #e9ecef); border-left: 4px solid var(--primary-color); }
      .browser-icon { font-size: 2rem; margin-right: 1rem; color: var(--primary-color); }
      .tech-grid { display: grid; grid-template-columns: repeat(auto-fit, minmax(150px, 1fr)); gap: 1rem; margin-top: 1.5rem; }
      .tech-item { text-align: center; padding: 1rem; background: white; border-radius: 10px; }
      .user-agent-panel { max-height: 0; overflow: hidden; transition: max-height 0.5s ease; border-radius: 8px; margin-top: 10px; }
      .user-agent-panel.active { max-height: 200px; }
      .floating { animation: float 6s ease-in-out infinite; }
      .risk-meter {
        height: 20px;
        border-radius: 10px;
        background: linear-gradient(to right, var(--low-risk), var(--medium-risk) 50%, var(--high-risk));
        position: relative;
        margin: 30px 0 10px;
      }
      .risk-indicator { position: absolute; height: 30px; width: 3px; background: #333; top: -5px; transform: translateX(-50%); }
      .risk-label { position: absolute; top: -25px; transform: translateX(-50%); font-weight: bold; font-size: 0.9rem; white-space: nowrap; }
      .history-timeline { position: relative; padding: 20px 0; }
      .timeline-item { position: relative; padding-left: 30px; margin-bottom: 30px; }
      .timeline-item:before {
        content: '';
        position: absolute;
        left: 0;
        top: 5px;
        width: 15px;
        height: 15px;
        border-radius: 50%;
        background: var(--primary-color);
        border: 3px solid white;
        z-index: 2;
      }
      .timeline-item:after { content: ''; position: absolute; left: 7px; top: 5px; height: 100%; width: 2px; background: var(--primary-color); }
      .timeline-item:last-child:after { display: none; }
      .timeline-date { display: inline-block; background: #f0f0f0; padding: 2px 10px; border-radius: 20px; font-size: 0.85rem; font-weight: bold; }
      .timeline-item.current .timeline-date { background: var(--primary-color); color: white; }
      .animated { animation: fadeInUp var(--animation-duration) forwards; }
      @keyframes fadeIn { from { opacity: 0; } to { opacity: 1; } }
      @keyframes fadeInUp { from { opacity: 0; transform: translateY(20px); } to { opacity: 1; transform: translateY(0); } }
      @keyframes slideDown { from { transform: translateY(-100%); } to { transform: translateY(0); } }
      @keyframes pulse {
        0% { box-shadow: 0 0 0 0 rgba(67, 97, 238, 0.4); }
        70% { box-shadow: 0 0 0 12px rgba(67, 97, 238, 0); }
        100% { box-shadow: 0 0 0 0 rgba(67, 97, 238, 0); }
      }
      @keyframes float { 0% { transform: translateY(0px); } 50% { transform: translateY(-10px); } 100% { transform: translateY(0px); } }
      @media (max-width: 768px) {
        .info-grid { grid-template-columns: 1fr; }
        .tech-grid { grid-template-columns: repeat(2, 1fr); }
        .map-container { height: 250px; }
      }
"""

# Dynamic values reach the script through data-* attributes only
PAGE_SCRIPT = """
      document.addEventListener('DOMContentLoaded', () => {
        (document.querySelectorAll('.notification .delete') || []).forEach(($delete) => {
          const $notification = $delete.parentNode;
          $delete.addEventListener('click', () => {
            $notification.classList.add('is-hidden');
          });
        });

        const locElement = document.getElementById('location-data');
        if (locElement && locElement.dataset.loc) {
          const locData = locElement.dataset.loc;
          const mapContainer = document.createElement('div');
          mapContainer.id = 'map';
          mapContainer.className = 'map-container';
          locElement.parentNode.appendChild(mapContainer);

          window.initBaiduMap = function() {
            const [latitude, longitude] = locData.split(',').map(Number);
            if (!isNaN(latitude) && !isNaN(longitude)) {
              const map = new BMap.Map('map');
              const point = new BMap.Point(longitude, latitude);
              map.centerAndZoom(point, 15);
              const marker = new BMap.Marker(point);
              map.addOverlay(marker);
              map.addControl(new BMap.NavigationControl());
              map.addControl(new BMap.ScaleControl());
              const infoWindow = new BMap.InfoWindow('IP位置: ' + locData);
              marker.addEventListener('click', function() {
                this.openInfoWindow(infoWindow);
              });
            }
          };

          const baiduMapScript = document.createElement('script');
          baiduMapScript.src = locElement.dataset.mapSrc;
          document.body.appendChild(baiduMapScript);
        }

        document.getElementById('copy-ip-btn')?.addEventListener('click', (event) => {
          const btn = event.currentTarget;
          navigator.clipboard.writeText(btn.dataset.ip).then(() => {
            btn.innerHTML = '<i class="fas fa-check"></i> 已复制';
            btn.classList.add('is-success');
            setTimeout(() => {
              btn.innerHTML = '<i class="fas fa-copy"></i> 复制IP';
              btn.classList.remove('is-success');
            }, 2000);
          });
        });

        document.getElementById('toggle-ua')?.addEventListener('click', () => {
          const panel = document.getElementById('user-agent-panel');
          const button = document.getElementById('toggle-ua');
          panel.classList.toggle('active');
          if (panel.classList.contains('active')) {
            button.innerHTML = '<i class="fas fa-eye-slash"></i> 隐藏详情';
          } else {
            button.innerHTML = '<i class="fas fa-eye"></i> 查看详情';
          }
        });

        const riskDataElement = document.getElementById('risk-data');
        if (riskDataElement) {
          const riskScore = parseInt(riskDataElement.dataset.risk) || 30;
          const riskIndicator = document.getElementById('risk-indicator');
          if (riskIndicator) {
            riskIndicator.style.left = riskScore + '%';
          }
        }

        const observer = new IntersectionObserver((entries) => {
          entries.forEach(entry => {
            if (entry.isIntersecting) {
              entry.target.classList.add('animated');
            }
          });
        }, { threshold: 0.1 });
        document.querySelectorAll('.card, .info-item, .tech-item, .map-container').forEach(el => {
          observer.observe(el);
        });
      });
"""

def _e(value: Any) -> str:
    """Escape a value for HTML text or attribute context"""
    return escape("" if value is None else str(value), quote=True)

def risk_color_class(score: int) -> str:
    if score > 80:
        return "has-text-danger"
    if score > 50:
        return "has-text-warning"
    return "has-text-success"

def risk_bar_color(score: int) -> str:
    if score > 80:
        return "var(--high-risk)"
    if score > 50:
        return "var(--medium-risk)"
    return "var(--low-risk)"

def _icon_for(label: str, table, default: str) -> str:
    for needle, icon in table:
        if needle in label:
            return icon
    return default

def _card(title: str, icon: str, body: str) -> str:
    return f"""
        <div class="card">
          <div class="card-header">
            <p class="card-header-title has-text-white">
              <i class="fas {icon}"></i>&nbsp;{title}
            </p>
          </div>
          <div class="card-content">
            {body}
          </div>
        </div>
    """

def render_search_form() -> str:
    """Render the lookup form fragment"""
    return """
    <div class="box" style="max-width: 700px; margin: 2rem auto 0;">
      <form action="/" method="get">
        <div class="field has-addons">
          <div class="control is-expanded">
            <input class="input is-medium" type="text" name="ip" placeholder="请输入IP地址 (例如: 8.8.8.8)" pattern="\\b(?:\\d{1,3}\\.){3}\\d{1,3}\\b" title="请输入有效的IP地址">
          </div>
          <div class="control">
            <button class="button is-medium btn-gradient" type="submit">
              <i class="fas fa-search"></i>&nbsp;查询
            </button>
          </div>
        </div>
        <p class="help has-text-centered">提示：不输入IP地址将查询您当前的IP信息</p>
      </form>
    </div>
    """

def render_no_data(message: Optional[str] = None) -> str:
    """Render the panel shown when no provider returned data"""
    return f"""
    <div class="container has-text-centered">
      <div class="notification is-warning" style="max-width: 600px; margin: 0 auto;">
        <button class="delete"></button>
        <i class="fas fa-exclamation-triangle"></i>
        {_e(message or NO_DATA_MESSAGE)}
      </div>
      <div class="content mt-5">
        <h3 class="title is-5">可能原因：</h3>
        <div class="tags is-centered">
          <span class="tag is-warning">IP地址不存在</span>
          <span class="tag is-warning">API请求限制</span>
          <span class="tag is-warning">网络连接问题</span>
        </div>
        <div class="mt-4">
          <p>请尝试以下方法：</p>
          <ul class="has-text-left" style="display: inline-block; text-align: left;">
            <li>检查IP地址是否正确</li>
            <li>确认网络连接正常</li>
            <li>尝试查询其他公共IP（如8.8.8.8）</li>
            <li>稍后重试</li>
          </ul>
        </div>
      </div>
    </div>
    """

def render_record(record, display_ip: str, map_ak: str) -> str:
    """Render the basic info cards and location section of a resolved record"""
    data = record.to_dict()
    cards = []
    for key, label, icon in INFO_FIELDS:
        value = data.get(key)
        if value:
            cards.append(f"""
          <div class="info-item">
            <div class="info-title"><i class="fas {icon}"></i> {label}</div>
            <div class="is-size-5 has-text-weight-semibold">{_e(value)}</div>
          </div>""")

    html = f"""
    <div class="columns">
      <div class="column">
        {_card("基本信息概览", "fa-info-circle", '<div class="info-grid">' + "".join(cards) + '</div>')}
      </div>
    </div>
    """

    if record.loc:
        latitude, _, longitude = record.loc.partition(",")
        map_src = BAIDU_MAP_API.format(ak=map_ak)
        location = f"""
            <div id="location-data" data-loc="{_e(record.loc)}" data-map-src="{_e(map_src)}">
              <p><i class="fas fa-map-marker-alt"></i> <strong>经纬度:</strong> {_e(record.loc)}</p>
              <p><i class="fas fa-external-link-alt"></i> <a href="https://maps.baidu.com/?q={_e(latitude)},{_e(longitude)}" target="_blank">在百度地图上查看</a></p>
              <button id="copy-ip-btn" class="button is-small is-info mt-3" data-ip="{_e(display_ip or record.ip)}">
                <i class="fas fa-copy"></i> 复制IP
              </button>
            </div>
        """
        html += f"""
    <div class="columns mt-5">
      <div class="column">
        {_card("地理位置信息", "fa-map-marked-alt", location)}
      </div>
    </div>
        """

    return html

def render_analysis(analysis: AnalysisResult) -> str:
    """Render the advanced threat analysis card"""
    score = analysis.risk_score
    color = risk_color_class(score)
    threat = analysis.threat_analysis
    proxy = analysis.proxy_detection
    blacklist = analysis.blacklist_status

    recommendations = "".join(f"<li>{_e(rec)}</li>" for rec in threat.recommendations)

    asn_rows = "".join(f"""
              <div class="timeline-item {'current' if entry.current else ''}">
                <span class="timeline-date">{_e(entry.date)}</span>
                <p><strong>{_e(entry.asn)}</strong> - {_e(entry.org)}</p>
              </div>""" for entry in analysis.asn_history)

    registration_rows = "".join(f"""
              <div class="timeline-item {'current' if entry.current else ''}">
                <span class="timeline-date">{_e(entry.date)}</span>
                <p>{_e(entry.city)}, {_e(entry.region)}, {_e(entry.country)}</p>
              </div>""" for entry in analysis.registration_history)

    blacklist_rows = "".join(f"""
                <tr>
                  <td>{_e(entry.list)}</td>
                  <td><span class="tag {'is-danger' if entry.status == '已列入' else 'is-success'}">{_e(entry.status)}</span></td>
                  <td>{_e(entry.last_checked)}</td>
                </tr>""" for entry in blacklist.lists)

    body = f"""
        <div class="content">
          <h4 class="title is-5"><i class="fas fa-bug"></i> 风险分析</h4>
          <div class="level is-mobile">
            <div class="level-left">
              <div class="level-item">
                <p>风险评分: <span class="{color}"><strong>{score}/100</strong></span></p>
              </div>
              <div class="level-item">
                <p>风险等级: <span class="{color}"><strong>{_e(analysis.risk_level)}</strong></span></p>
              </div>
            </div>
          </div>
          <div class="risk-meter">
            <div class="risk-indicator" id="risk-indicator">
              <div class="risk-label">{score}</div>
            </div>
          </div>
          <div class="notification" style="background: linear-gradient(to right, {risk_bar_color(score)}, rgba(255,255,255,0.8));">
            <p><strong>{_e(threat.level)}威胁:</strong> {_e(threat.description)}</p>
            <p class="mt-2"><strong>建议措施:</strong></p>
            <ul>{recommendations}</ul>
          </div>
        </div>
        <div class="columns mt-5">
          <div class="column">
            <div class="content">
              <h4 class="title is-5"><i class="fas fa-network-wired"></i> IP类型分析</h4>
              <div class="info-grid">
                <div class="info-item">
                  <div class="info-title"><i class="fas fa-ethernet"></i> IP类型</div>
                  <div class="is-size-5 has-text-weight-semibold">{_e(analysis.ip_type)}</div>
                </div>
                <div class="info-item">
                  <div class="info-title"><i class="fas fa-server"></i> 托管服务商</div>
                  <div class="is-size-5 has-text-weight-semibold">{_e(analysis.hosting_provider)}</div>
                </div>
                <div class="info-item">
                  <div class="info-title"><i class="fas fa-user-secret"></i> 代理检测</div>
                  <div class="is-size-5 has-text-weight-semibold">{_e(proxy.type if proxy.detected else '未检测到')}</div>
                </div>
              </div>
            </div>
          </div>
        </div>
        <div class="columns mt-5">
          <div class="column">
            <div class="content">
              <h4 class="title is-5"><i class="fas fa-history"></i> ASN历史记录</h4>
              <div class="history-timeline">{asn_rows}
              </div>
            </div>
          </div>
          <div class="column">
            <div class="content">
              <h4 class="title is-5"><i class="fas fa-globe-asia"></i> 注册地历史</h4>
              <div class="history-timeline">{registration_rows}
              </div>
            </div>
          </div>
        </div>
        <div class="columns mt-5">
          <div class="column">
            <div class="content">
              <h4 class="title is-5"><i class="fas fa-ban"></i> 黑名单状态</h4>
              <div class="notification {'is-danger' if blacklist.is_listed else 'is-success'}">
                <p>黑名单状态: <strong>{'已列入' if blacklist.is_listed else '未列入'}</strong></p>
              </div>
              <table class="table is-fullwidth">
                <thead>
                  <tr><th>黑名单名称</th><th>状态</th><th>最后检查</th></tr>
                </thead>
                <tbody>{blacklist_rows}
                </tbody>
              </table>
            </div>
          </div>
        </div>
    """

    return f"""
    <div class="columns">
      <div class="column">
        {_card("高级威胁分析", "fa-shield-alt", body)}
      </div>
    </div>
    """

def render_browser_info(browser: BrowserContext) -> str:
    """Render the visitor's own browser metadata"""
    device = ('<i class="fas fa-mobile-alt"></i> 移动设备' if browser.is_mobile
              else '<i class="fas fa-laptop"></i> 桌面设备')
    languages = [lang for lang in browser.languages if lang]
    preferred = languages[0] if languages else "未知"
    supported = ", ".join(languages) or "未知"

    return f"""
    <div class="columns">
      <div class="column is-half">
        <div class="browser-info p-4 mb-4">
          <div class="is-flex is-align-items-center">
            <div class="browser-icon">
              <i class="{_icon_for(browser.browser_name, BROWSER_ICONS, 'fas fa-globe')}"></i>
            </div>
            <div>
              <h3 class="title is-4">{_e(browser.browser_name)}</h3>
              <p class="subtitle is-6"><i class="{_icon_for(browser.os, OS_ICONS, 'fas fa-laptop')}"></i> {_e(browser.os)}</p>
            </div>
          </div>
        </div>
        <div class="content">
          <h4 class="title is-5"><i class="fas fa-info-circle"></i> 基本信息</h4>
          <ul>
            <li><strong>访问时间:</strong> {_e(browser.timestamp)}</li>
            <li><strong>您的IP地址:</strong> {_e(browser.cf_connecting_ip)}</li>
            <li><strong>设备类型:</strong> {device}</li>
            <li><strong>Cloudflare Ray ID:</strong> {_e(browser.cf_ray)}</li>
          </ul>
        </div>
      </div>
      <div class="column is-half">
        <div class="content">
          <h4 class="title is-5"><i class="fas fa-language"></i> 语言与区域</h4>
          <ul>
            <li><strong>首选语言:</strong> {_e(preferred)}</li>
            <li><strong>支持语言:</strong> {_e(supported)}</li>
          </ul>
        </div>
      </div>
    </div>
    <div class="content mt-5">
      <button id="toggle-ua" class="button is-small is-link">
        <i class="fas fa-eye"></i> 查看User-Agent详情
      </button>
      <div id="user-agent-panel" class="user-agent-panel">
        <pre class="p-3" style="overflow: auto; max-height: 150px;">{_e(browser.user_agent)}</pre>
        <p class="help p-3">该信息由您的浏览器提供，用于识别您的设备和浏览器类型</p>
      </div>
    </div>
    """

def render_page(display_ip: str, result: Optional[LookupResult], analysis: Optional[AnalysisResult],
                browser: BrowserContext, map_ak: str = "YOUR_BAIDU_MAP_AK") -> str:
    """
    Render the full report page

    Args:
        display_ip: Address the report is about (may be empty)
        result: Resolver outcome; None or a LookupFailure renders the no-data panel
        analysis: Synthetic analysis, shown only alongside a successful result
        browser: Visitor browser metadata
        map_ak: Baidu map API key

    Returns:
        HTML document
    """
    failed = result is None or result.error
    risk_score = (analysis.risk_score if analysis and not failed else 0) or DEFAULT_RISK_SCORE

    target = ""
    if display_ip:
        target = f"""
      <div class="has-text-centered mb-5">
        <h2 class="title is-4">查询结果</h2>
        <div class="ip-badge">
          <i class="fas fa-address-card"></i> 目标IP: {_e(display_ip)}
        </div>
        <div id="risk-data" data-risk="{risk_score}" style="display: none;"></div>
      </div>"""

    if failed:
        main = render_no_data(result.message if result is not None else None)
        advanced = ""
    else:
        main = render_record(result, display_ip, map_ak)
        advanced = render_analysis(analysis) if analysis else ""

    return f"""<!DOCTYPE html>
<html lang="zh-CN">
  <head>
    <meta charset="UTF-8">
    <meta name="viewport" content="width=device-width, initial-scale=1">
    <title>IP信息查询 - IPGOT</title>
    <link rel="stylesheet" href="{BULMA_CSS}">
    <link rel="stylesheet" href="{FONT_AWESOME_CSS}">
    <style>{PAGE_CSS}    </style>
  </head>
  <body>
    <section class="hero is-medium">
      <div class="hero-body">
        <div class="container has-text-centered">
          <h1 class="title is-1 has-text-white floating">
            <i class="fas fa-search-location"></i> IP信息查询
          </h1>
          <p class="subtitle has-text-light">高级IP分析与威胁情报平台</p>
          {render_search_form()}
        </div>
      </div>
    </section>
    <div class="container my-6">{target}
      <div>{main}</div>
      <div class="mt-6">{advanced}</div>
      <div class="mt-6">
        {_card("您的浏览器信息", "fa-user", render_browser_info(browser))}
      </div>
    </div>
    <footer class="footer">
      <div class="content has-text-centered">
        <p><strong>高级IP分析工具</strong> - 提供专业的IP地址威胁情报与历史分析</p>
        <p>&copy; {datetime.date.today().year} IPGOT - 数据来源于多个威胁情报源</p>
      </div>
    </footer>
    <script>{PAGE_SCRIPT}    </script>
  </body>
</html>
"""
